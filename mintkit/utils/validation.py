"""Input validation helpers (no I/O)."""

from eth_utils import is_hex_address, to_checksum_address

from mintkit.domain.errors import InvalidInputError


def is_valid_address(address: object) -> bool:
    """``0x`` + 40 hex chars; mixed-case input must carry a valid checksum."""
    if not isinstance(address, str) or not address.startswith("0x"):
        return False
    if not is_hex_address(address):
        return False
    body = address[2:]
    if body.islower() or body.isupper():
        return True
    return to_checksum_address(address) == address


def normalize_address(address: object, field_name: str = "address") -> str:
    """Validate and return the checksummed form, or raise ``InvalidInputError``."""
    if not is_valid_address(address):
        raise InvalidInputError(
            f"Invalid {field_name}", details={field_name: address}
        )
    return to_checksum_address(address)  # type: ignore[arg-type]


def validate_quantity(quantity: object) -> int:
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
        raise InvalidInputError(
            "Quantity must be a positive integer", details={"quantity": quantity}
        )
    return quantity
