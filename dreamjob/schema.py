from typing import Any, Dict, List

USER_FIELDS = ["email", "name", "password"]
CANDIDATE_FIELDS = ["name"]
VACANCY_FIELDS = ["title"]
OPTIONAL_STR_FIELDS = ["description"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _valid_email(v: str) -> bool:
    local, sep, domain = v.partition("@")
    return bool(sep and local and "." in domain and not domain.startswith(".") and not domain.endswith("."))


def _check_required(data: Dict[str, Any], fields: List[str]) -> List[str]:
    errors: List[str] = []
    for f in fields:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")
    for f in OPTIONAL_STR_FIELDS:
        if f in data and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")
    return errors


def _check_city(data: Dict[str, Any]) -> List[str]:
    city_id = data.get("city_id")
    if city_id is None:
        return []
    if isinstance(city_id, bool) or not isinstance(city_id, int) or city_id <= 0:
        return ["Field 'city_id' must be a positive integer if provided"]
    return []


def validate_user(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    Email case is preserved; uniqueness is checked by the store, not here.
    """
    errors = _check_required(data, USER_FIELDS)
    if _is_non_empty_str(data.get("email")) and not _valid_email(data["email"].strip()):
        errors.append("Field 'email' must look like name@domain.tld")
    return errors


def validate_candidate(data: Dict[str, Any]) -> List[str]:
    return _check_required(data, CANDIDATE_FIELDS) + _check_city(data)


def validate_vacancy(data: Dict[str, Any]) -> List[str]:
    errors = _check_required(data, VACANCY_FIELDS) + _check_city(data)
    if "visible" in data and not isinstance(data["visible"], bool):
        errors.append("Field 'visible' must be a boolean if provided")
    return errors
