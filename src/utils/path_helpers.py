def path_matches(path: str, allowed_paths: set[str]) -> bool:
    """Check if path matches any allowed path, handling trailing slashes.

    Returns True if:
    - path exactly matches an allowed path, OR
    - path with trailing slash added/removed matches an allowed path
    """
    if path in allowed_paths:
        return True

    if not path.endswith("/") and path + "/" in allowed_paths:
        return True

    if path.endswith("/") and path[:-1] in allowed_paths:
        return True

    return False
