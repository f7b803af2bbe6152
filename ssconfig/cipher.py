"""
Names of the stream ciphers a server entry may ask for.

Only the names live here; the relay owns the cipher implementations.
"""

import enum
from typing import Optional


class CipherType(str, enum.Enum):
    TABLE = "table"
    RC4 = "rc4"
    RC4_MD5 = "rc4-md5"

    AES_128_CFB = "aes-128-cfb"
    AES_192_CFB = "aes-192-cfb"
    AES_256_CFB = "aes-256-cfb"
    AES_128_CFB1 = "aes-128-cfb1"
    AES_192_CFB1 = "aes-192-cfb1"
    AES_256_CFB1 = "aes-256-cfb1"
    AES_128_CFB8 = "aes-128-cfb8"
    AES_192_CFB8 = "aes-192-cfb8"
    AES_256_CFB8 = "aes-256-cfb8"
    AES_128_OFB = "aes-128-ofb"
    AES_192_OFB = "aes-192-ofb"
    AES_256_OFB = "aes-256-ofb"
    AES_128_CTR = "aes-128-ctr"
    AES_192_CTR = "aes-192-ctr"
    AES_256_CTR = "aes-256-ctr"

    BF_CFB = "bf-cfb"
    CAMELLIA_128_CFB = "camellia-128-cfb"
    CAMELLIA_192_CFB = "camellia-192-cfb"
    CAMELLIA_256_CFB = "camellia-256-cfb"
    CAST5_CFB = "cast5-cfb"
    DES_CFB = "des-cfb"
    IDEA_CFB = "idea-cfb"
    RC2_CFB = "rc2-cfb"
    SEED_CFB = "seed-cfb"

    SALSA20 = "salsa20"
    CHACHA20 = "chacha20"

    @classmethod
    def parse(cls, name: str) -> Optional["CipherType"]:
        """Look up a cipher by its exact name, or return None."""
        try:
            return cls(name)
        except ValueError:
            return None

    def __str__(self):
        return self.value
