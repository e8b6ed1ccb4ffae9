from .payment import AlipayTrade, CallbackOutcome, ReturnPayload

__all__ = [
    "AlipayTrade",
    "CallbackOutcome",
    "ReturnPayload",
]
