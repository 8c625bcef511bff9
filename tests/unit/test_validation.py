import pytest

from mintkit.domain.errors import InvalidInputError
from mintkit.utils.validation import is_valid_address, normalize_address, validate_quantity

CHECKSUMMED = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"


@pytest.mark.parametrize("address", [
    CHECKSUMMED,
    CHECKSUMMED.lower(),
    "0x" + CHECKSUMMED[2:].upper(),
])
def test_valid_addresses(address):
    assert is_valid_address(address)
    assert normalize_address(address) == CHECKSUMMED


@pytest.mark.parametrize("address", [
    None,
    "",
    "5aaeb6053f3e94c9b9a09f33669435e7ef1beaed",
    "0x1234",
    "0xZZaeb6053f3e94c9b9a09f33669435e7ef1beaed",
    "0x5AAeb6053F3E94C9b9A09f33669435E7Ef1BeAed",
])
def test_invalid_addresses(address):
    assert not is_valid_address(address)
    with pytest.raises(InvalidInputError):
        normalize_address(address, "wallet")


@pytest.mark.parametrize("quantity", [0, -3, 2.0, "1", False])
def test_invalid_quantity(quantity):
    with pytest.raises(InvalidInputError):
        validate_quantity(quantity)


def test_valid_quantity():
    assert validate_quantity(4) == 4
