"""
Error types raised by the codec, the signing pipeline and the wallet.

Every failure caused by untrusted input is reported as one of these typed
exceptions; none of them is fatal to the caller.
"""

from typing import Final, Optional

from typing_extensions import override


class EthereumException(Exception):
    """
    Base class for all exceptions _expected_ to be thrown during normal
    operation.
    """


class RLPException(EthereumException):
    """
    Common base class for all RLP exceptions.
    """


class RLPEncodingError(RLPException):
    """
    Indicates that RLP encoding failed.
    """


class RLPDecodingError(RLPException):
    """
    Indicates that RLP decoding failed.
    """

    @override
    def __str__(self) -> str:
        message = [super().__str__()]
        current: BaseException = self
        while isinstance(current, RLPDecodingError) and current.__cause__:
            current = current.__cause__
            if isinstance(current, RLPDecodingError):
                as_str = super(RLPDecodingError, current).__str__()
            else:
                as_str = str(current)
            message.append(f"\tbecause {as_str}")
        return "\n".join(message)


class UnexpectedString(RLPDecodingError):
    """
    A string header was found where a list is required.
    """

    def __init__(self) -> None:
        super().__init__("unexpected string")


class UnexpectedList(RLPDecodingError):
    """
    A list header was found where a string or scalar is required.
    """

    def __init__(self) -> None:
        super().__init__("unexpected list")


class ListLengthMismatch(RLPDecodingError):
    """
    The number of bytes consumed while decoding a list differs from the
    payload length declared by its header.
    """

    expected: Final[int]
    """
    Payload length declared by the header.
    """

    got: Final[int]
    """
    Number of bytes actually consumed.
    """

    def __init__(self, expected: int, got: int) -> None:
        super().__init__(
            f"list length mismatch: expected {expected}, got {got}"
        )
        self.expected = expected
        self.got = got


class InputTooShort(RLPDecodingError):
    """
    The input ended before the value being decoded was complete.
    """

    def __init__(self) -> None:
        super().__init__("input too short")


class UnexpectedLength(RLPDecodingError):
    """
    A value has the wrong length, or bytes remain after a complete value.
    """

    def __init__(self, message: str = "unexpected length") -> None:
        super().__init__(message)


class LeadingZero(RLPDecodingError):
    """
    A scalar or a length prefix is encoded with a leading zero byte.
    """

    def __init__(self) -> None:
        super().__init__("leading zero")


class NonCanonicalSingleByte(RLPDecodingError):
    """
    A single byte below `0x80` is wrapped in a string header.
    """

    def __init__(self) -> None:
        super().__init__("non-canonical single byte")


class NonCanonicalSize(RLPDecodingError):
    """
    The long form header is used for a payload shorter than 56 bytes.
    """

    def __init__(self) -> None:
        super().__init__("non-canonical size")


class Overflow(RLPDecodingError):
    """
    A decoded value does not fit into its target type.
    """

    def __init__(self) -> None:
        super().__init__("overflow")


class CustomDecodingError(RLPDecodingError):
    """
    Protocol specific rejection of otherwise well formed RLP.
    """


class TransactionTypeError(RLPDecodingError):
    """
    Unknown [EIP-2718] transaction type byte.

    [EIP-2718]: https://eips.ethereum.org/EIPS/eip-2718
    """

    transaction_type: Final[int]
    """
    The type byte of the transaction that caused the error.
    """

    def __init__(self, transaction_type: int):
        super().__init__(f"unknown transaction type `{transaction_type}`")
        self.transaction_type = transaction_type


class SignatureError(EthereumException):
    """
    Base class for signing and recovery failures.
    """


class InvalidSignatureError(SignatureError):
    """
    Thrown when a signature does not describe a point on the curve, or its
    scalars are out of range.
    """


class InvalidParityError(SignatureError):
    """
    Thrown when a `v` value is not one of the accepted parity encodings.
    """

    v: Final[int]

    def __init__(self, v: int) -> None:
        super().__init__(f"invalid signature parity `{v}`")
        self.v = v


class WalletError(EthereumException):
    """
    Base class for key material failures.
    """


class InvalidPrivateKeyError(WalletError):
    """
    The secret scalar is zero, not below the curve order, or malformed.
    """


class ChainIdMismatchError(WalletError):
    """
    A transaction is bound to a different chain than the wallet signing it.
    """

    def __init__(self, wallet_chain_id: int, tx_chain_id: int) -> None:
        super().__init__(
            f"transaction chain id {tx_chain_id} does not match "
            f"wallet chain id {wallet_chain_id}"
        )


class KeystoreError(WalletError):
    """
    Encrypting, decrypting, reading or writing a keystore failed.

    The underlying failure (bad password, I/O error, malformed blob) is kept
    in `cause` and chained as `__cause__`.
    """

    cause: Final[Optional[BaseException]]

    def __init__(
        self, message: str, cause: Optional[BaseException] = None
    ) -> None:
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.cause = cause
