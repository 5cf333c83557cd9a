"""Git object hashing for content comparison without downloads."""

import hashlib


def git_blob_sha(content: str) -> str:
    """Compute the SHA-1 git assigns to a blob with this UTF-8 content.

    Example:
        >>> git_blob_sha("")
        'e69de29bb2d1d6434b8b29ae775ad8c2e48c5391'
    """
    data = content.encode("utf-8")
    header = f"blob {len(data)}\0".encode("ascii")
    return hashlib.sha1(header + data).hexdigest()
