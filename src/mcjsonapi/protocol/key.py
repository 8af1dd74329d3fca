""" Authentication keys for JSONAPI requests. Every request carries a key
    derived from the method (or stream source) being accessed and the
    server-side credentials; the server recomputes the same digest and
    rejects the request if they differ.
"""

import hashlib


def make_key(method, username, password, salt=''):
    """ Return the lowercase hexadecimal SHA-256 digest of the UTF-8 encoded
        concatenation of *username*, *method*, *password*, and *salt*, in
        that order. Any argument that is None is treated as an empty string.
    """

    parts = (username, method, password, salt)
    parts = ['' if part is None else str(part) for part in parts]

    joined = ''.join(parts)
    digest = hashlib.sha256(joined.encode('utf-8'))

    return digest.hexdigest()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
