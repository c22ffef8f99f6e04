from .json_clean import extract_first_balanced_block, extract_json_payload, loads_lenient  # noqa: F401
