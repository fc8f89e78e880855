from abc import ABC, abstractmethod

from cryptography.fernet import Fernet, InvalidToken

from userlink.settings import EncryptionSettings


class Encryptor(ABC):
    @abstractmethod
    def encrypt(self, plaintext: str) -> str:
        ...

    @abstractmethod
    def decrypt(self, ciphertext: str) -> str:
        ...


class FernetEncryptor(Encryptor):
    """
    Symmetric encryption for credentials stored in the database. Tokens are
    authenticated, so a ciphertext that has been tampered with (or encrypted
    with another key) will fail to decrypt instead of returning garbage.
    """

    fernet: Fernet

    def __init__(self, key: str | bytes | None = None) -> None:
        if key is None:
            key = EncryptionSettings().key

        self.fernet = Fernet(key.encode() if isinstance(key, str) else key)

    def encrypt(self, plaintext: str) -> str:
        return self.fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, ciphertext: str) -> str:
        try:
            return self.fernet.decrypt(ciphertext.encode()).decode()

        except InvalidToken as ex:
            raise ValueError("Credentials could not be decrypted, is the key correct?") from ex


class PlaintextEncryptor(Encryptor):
    def encrypt(self, plaintext: str) -> str:
        return plaintext

    def decrypt(self, ciphertext: str) -> str:
        return ciphertext
