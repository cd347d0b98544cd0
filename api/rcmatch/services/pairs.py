def canonical_pair(user_a_id: str, user_b_id: str) -> tuple[str, str]:
    a, b = sorted([str(user_a_id), str(user_b_id)])
    return a, b


def pair_key(user_a_id: str, user_b_id: str) -> str:
    """Order-independent key for the unordered pair {user_a_id, user_b_id}."""
    a, b = canonical_pair(user_a_id, user_b_id)
    return f"{a}:{b}"
