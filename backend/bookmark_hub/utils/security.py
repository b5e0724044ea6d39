"""密码哈希

演示用户和 create_user 写入的密码都经过这里，数据库里不存明文。
"""
from passlib.context import CryptContext

# bcrypt 后端与新版 bcrypt 包不兼容，使用纯 Python 的 pbkdf2
password_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return password_context.hash(password)
