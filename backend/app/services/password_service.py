"""
Hachage des mots de passe : PBKDF2-HMAC-SHA512, sel aléatoire de 64 octets.

Format stocké : "<sel hex>:<clé dérivée hex>", identique aux hash déjà présents
en base (hex majuscule). La vérification compare en temps constant.
"""

import hashlib
import hmac
import secrets

KEY_SIZE = 64
ITERATIONS = 350_000
HASH_ALGORITHM = "sha512"


def _derive(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac(HASH_ALGORITHM, password.encode("utf-8"), salt, ITERATIONS, dklen=KEY_SIZE)


def hash_password(password: str) -> str:
    """Retourne le hash encodé du mot de passe, avec un nouveau sel à chaque appel."""
    salt = secrets.token_bytes(KEY_SIZE)
    key = _derive(password, salt)
    return f"{salt.hex().upper()}:{key.hex().upper()}"


def verify_password(password: str, password_hash: str) -> bool:
    """
    Vérifie un mot de passe contre son hash encodé.
    Retourne False si le format n'est pas exactement deux parties hexadécimales.
    """
    parts = password_hash.split(":")
    if len(parts) != 2:
        return False

    try:
        salt = bytes.fromhex(parts[0])
        expected = bytes.fromhex(parts[1])
    except ValueError:
        return False

    if not salt or not expected:
        return False

    return hmac.compare_digest(_derive(password, salt), expected)
