# XXTEA (Corrected Block TEA) cipher for obfuscating spreadsheet cells
# Byte/word packing is little-endian; the plaintext carries its length in a trailing word

import base64
import binascii

DELTA = 0x9E3779B9
MASK = 0xFFFFFFFF


def to_words(data: bytes, include_length: bool) -> list:
    """
    Pack bytes into 32-bit words, 4 bytes per word, little-endian.
    If include_length is set, one extra word holding len(data) is appended.
    """
    length = len(data)
    n = length >> 2
    if length & 3:
        n += 1

    if include_length:
        words = [0] * (n + 1)
        words[n] = length
    else:
        words = [0] * n

    for i in range(length):
        words[i >> 2] |= (data[i] & 0xFF) << ((i & 3) << 3)
    return words


def to_bytes(words: list, include_length: bool):
    """
    Unpack words back into bytes.

    With include_length the trailing word must be a length consistent with the
    0-3 bytes of padding slack, otherwise None is returned (wrong key or
    damaged ciphertext).
    """
    length = len(words)
    n = length << 2
    if include_length:
        if length == 0:
            return None
        m = words[length - 1]
        n -= 4
        if m < n - 3 or m > n:
            return None
        n = m

    return bytes((words[i >> 2] >> ((i & 3) << 3)) & 0xFF for i in range(n))


def fix_key(key: list) -> list:
    """Zero-extend a key to at least 4 words. Longer keys are left alone."""
    if len(key) < 4:
        key = key + [0] * (4 - len(key))
    return key


def _mx(sum_, y, z, p, e, key):
    return (((z >> 5 ^ y << 2) + (y >> 3 ^ z << 4)) ^ ((sum_ ^ y) + (key[(p & 3) ^ e] ^ z))) & MASK


def encrypt_words(v: list, key: list) -> list:
    """
    Encrypt a word list in place and return it.

    Only key[0..3] are ever read. A single-word list still runs every round,
    updating the word from itself.
    """
    length = len(v)
    n = length - 1
    z = v[n]
    sum_ = 0
    for _ in range(6 + 52 // length):
        sum_ = (sum_ + DELTA) & MASK
        e = (sum_ >> 2) & 3
        for p in range(n):
            y = v[p + 1]
            v[p] = (v[p] + _mx(sum_, y, z, p, e, key)) & MASK
            z = v[p]
        y = v[0]
        v[n] = (v[n] + _mx(sum_, y, z, n, e, key)) & MASK
        z = v[n]
    return v


def decrypt_words(v: list, key: list) -> list:
    """Inverse of encrypt_words, in place."""
    length = len(v)
    n = length - 1
    y = v[0]
    rounds = 6 + 52 // length
    sum_ = (rounds * DELTA) & MASK
    for _ in range(rounds):
        e = (sum_ >> 2) & 3
        for p in range(n, 0, -1):
            z = v[p - 1]
            v[p] = (v[p] - _mx(sum_, y, z, p, e, key)) & MASK
            y = v[p]
        z = v[n]
        v[0] = (v[0] - _mx(sum_, y, z, 0, e, key)) & MASK
        y = v[0]
        sum_ = (sum_ - DELTA) & MASK
    return v


def _key_words(key) -> list:
    if isinstance(key, str):
        key = key.encode('utf-8')
    return fix_key(to_words(key, False))


def encrypt(data: bytes, key) -> bytes:
    """Encrypt raw bytes. Empty data is returned unchanged."""
    if not data:
        return data
    return to_bytes(encrypt_words(to_words(data, True), _key_words(key)), False)


def decrypt(data: bytes, key):
    """Decrypt raw bytes. Returns None if the length check fails."""
    if not data:
        return data
    return to_bytes(decrypt_words(to_words(data, False), _key_words(key)), True)


def _b64decode(text):
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        return None


def is_base64(text: str) -> bool:
    """True if text is well-formed standard Base64 (padding required)."""
    return isinstance(text, str) and _b64decode(text) is not None


def encrypt_to_base64(text: str, key) -> str:
    """Encrypt a UTF-8 string and return standard Base64."""
    return base64.b64encode(encrypt(text.encode('utf-8'), key)).decode('ascii')


def decrypt_from_base64(text: str, key):
    """
    Decrypt a Base64 cell back to a string.

    Returns None when the cell is not Base64, when the length check fails,
    or when the result is not UTF-8. Callers treat all three the same way:
    wrong key or garbled data.
    """
    raw = _b64decode(text)
    if raw is None:
        return None
    data = decrypt(raw, key)
    if data is None:
        return None
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError:
        return None
