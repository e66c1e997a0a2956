"""Constant-product swap math for the virtual market maker.

Pure functions over a reserve pair. No fees are charged: the virtual pool is
only a pricing curve, not real deposited liquidity.
"""


class InvalidTrade(ValueError):
    """Requested output meets or exceeds the available reserve."""


def get_amount_out(amount_in: float, reserve_in: float, reserve_out: float) -> float:
    """
    Given an input amount of an asset and pair reserves, return the output
    amount of the other asset.

    Args:
        amount_in: Amount supplied to the pool (>= 0)
        reserve_in: Reserve of the supplied asset
        reserve_out: Reserve of the received asset

    Returns:
        Amount received (0 when amount_in is 0)
    """
    return (amount_in * reserve_out) / (reserve_in + amount_in)


def get_amount_in(amount_out: float, reserve_in: float, reserve_out: float) -> float:
    """
    Given an output amount of an asset and pair reserves, return the input
    amount of the other asset required to receive it.

    Args:
        amount_out: Amount to receive from the pool
        reserve_in: Reserve of the supplied asset
        reserve_out: Reserve of the received asset

    Returns:
        Amount that must be supplied

    Raises:
        InvalidTrade: If amount_out would drain the output reserve
    """
    if amount_out >= reserve_out:
        raise InvalidTrade(
            f"Cannot take {amount_out} out of a reserve of {reserve_out}"
        )
    return (reserve_in * amount_out) / (reserve_out - amount_out)
