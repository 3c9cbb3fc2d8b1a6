"""Pine Meta information.
   Pine keeps local credentials in a single passphrase-encrypted file.
"""
__title__ = 'pine'
__description__ = (
   'Pine keeps local credentials in a single '
   'passphrase-encrypted file.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2024 Pine Developers'
__author__ = 'Pine Developers'
__license__ = 'Apache-2.0'
