"""CPF/CNPJ input mask and validation. The salon id is the digits of its document."""

import re

from agenda.application.services.search import only_digits

REPEATED_DIGITS_RE = re.compile(r"^(\d)\1+$")


def format_cpf_cnpj(value: str) -> str:
    """Progressive mask: up to 11 digits as CPF (000.000.000-00), beyond as CNPJ (00.000.000/0000-00)."""
    digits = only_digits(value)
    if len(digits) <= 11:
        masked = re.sub(r"(\d{3})(\d)", r"\1.\2", digits, count=1)
        masked = re.sub(r"(\d{3})(\d)", r"\1.\2", masked, count=1)
        masked = re.sub(r"(\d{3})(\d{1,2})", r"\1-\2", masked, count=1)
    else:
        masked = re.sub(r"(\d{2})(\d)", r"\1.\2", digits, count=1)
        masked = re.sub(r"(\d{3})(\d)", r"\1.\2", masked, count=1)
        masked = re.sub(r"(\d{3})(\d)", r"\1/\2", masked, count=1)
        masked = re.sub(r"(\d{4})(\d)", r"\1-\2", masked, count=1)
    return re.sub(r"(-\d{2})\d+$", r"\1", masked)


def _cpf_check_digit(digits: str, weight_start: int) -> int:
    total = sum(int(d) * w for d, w in zip(digits, range(weight_start, 1, -1)))
    remainder = (total * 10) % 11
    return 0 if remainder == 10 else remainder


def validate_cpf(cpf: str) -> bool:
    cpf = only_digits(cpf)
    if len(cpf) != 11 or REPEATED_DIGITS_RE.match(cpf):
        return False
    if _cpf_check_digit(cpf[:9], 10) != int(cpf[9]):
        return False
    return _cpf_check_digit(cpf[:10], 11) == int(cpf[10])


def validate_cnpj(cnpj: str) -> bool:
    # Only the repeated-digit check; CNPJ check digits are not verified.
    cnpj = only_digits(cnpj)
    return len(cnpj) == 14 and not REPEATED_DIGITS_RE.match(cnpj)


def validate_cpf_cnpj(value: str) -> bool:
    digits = only_digits(value)
    if len(digits) == 11:
        return validate_cpf(digits)
    if len(digits) == 14:
        return validate_cnpj(digits)
    return False


def salon_id_from_document(document: str) -> str:
    return only_digits(document)
