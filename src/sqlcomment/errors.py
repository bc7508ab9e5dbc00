class UnsupportedCapabilityError(RuntimeError):
    """Raised when the wrapped driver or transaction lacks an optional operation."""

    def __init__(self, target: str, operation: str) -> None:
        """Record which wrapper and operation were requested."""
        self.target = target
        self.operation = operation
        super().__init__(f"{target}.{operation} is not supported")
