"""
Domain-specific errors for the commissions bounded context.

All errors raised from the domain layer must be defined here.
These are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""


class CommissionDomainError(Exception):
    """Base error for all commissions domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class BrokerNotFoundError(CommissionDomainError):
    """Raised when no commission configuration exists for a broker."""

    def __init__(self, broker: str) -> None:
        super().__init__(f"Broker configuration not found: {broker}")
        self.broker = broker


class InactiveBrokerError(CommissionDomainError):
    """Raised when an inactive broker is selected as the default."""

    def __init__(self, broker: str) -> None:
        super().__init__(f"Broker configuration is inactive: {broker}")
        self.broker = broker


class BrokerAlreadyExistsError(CommissionDomainError):
    """Raised when adding a configuration for a broker that already has one."""

    def __init__(self, broker: str) -> None:
        super().__init__(f"Broker configuration already exists: {broker}")
        self.broker = broker


class InvalidCommissionConfigError(CommissionDomainError):
    """Raised when a commission configuration fails validation."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(f"Invalid commission configuration: {'; '.join(errors)}")
        self.errors = errors


class InvalidParameterError(CommissionDomainError):
    """Raised when a calculation parameter is outside its allowed range."""

    def __init__(self, name: str, value: object, reason: str) -> None:
        super().__init__(f"Invalid {name}={value}: {reason}")
        self.name = name
        self.value = value
        self.reason = reason


class TradeNotFoundError(CommissionDomainError):
    """Raised when a trade cannot be found."""

    def __init__(self, trade_id: int) -> None:
        super().__init__(f"Trade not found: {trade_id}")
        self.trade_id = trade_id


class InvalidTradeTypeError(CommissionDomainError):
    """Raised when an operation requires a different trade type."""

    def __init__(self, trade_id: int, expected: str) -> None:
        super().__init__(f"Trade {trade_id} must be a {expected} trade")
        self.trade_id = trade_id
        self.expected = expected


class CustodyFeeAlreadyRecordedError(CommissionDomainError):
    """Raised when a custody fee already exists for a month and broker."""

    def __init__(self, month: str, broker: str) -> None:
        super().__init__(f"Custody fee already exists for {month} - {broker}")
        self.month = month
        self.broker = broker


class CustodyFeeNotFoundError(CommissionDomainError):
    """Raised when a custody fee record cannot be found."""

    def __init__(self, fee_id: int) -> None:
        super().__init__(f"Custody fee not found: {fee_id}")
        self.fee_id = fee_id
