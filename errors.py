import os


class TallyError(Exception):
    pass


class OutOfMemory(TallyError):
    def __init__(self, requested: int, capacity: int, message: str | None = None):
        super().__init__(message or f"out of memory growing constant pool to {requested} slots")
        self.requested = requested
        self.capacity = capacity  # capacity still held by the store


class TallyRuntimeError(TallyError):
    def __init__(self, message: str, ip: int | None = None, file: str | None = None, line: int | None = None):
        super().__init__(message)
        self.message = message
        self.ip = ip
        self.file = file
        self.line = line

    def format(self, indent: str = "") -> str:
        lines = [f"{indent}Runtime error: {self.message}"]
        if self.ip is not None:
            file_short = os.path.basename(self.file) if self.file else "<unknown>"
            if self.line is None:
                loc = f"{file_short}:ip={self.ip:04d}"
            else:
                loc = f"{file_short}:{self.line}"
            lines.append(f"{indent}  at {loc}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format()
