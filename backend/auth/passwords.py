from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str | None) -> bool:
    if not password_hash:
        # Keep the unknown-account path as slow as a real check.
        pwd_context.dummy_verify()
        return False
    return pwd_context.verify(plain_password, password_hash)
