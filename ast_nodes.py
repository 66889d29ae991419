class ASTNode:
    # Optional source line (1-based). Parser may set this.
    line: int | None = None


class Program(ASTNode):
    def __init__(self, statements):
        self.statements = statements


class Assign(ASTNode):
    def __init__(self, name, value):
        self.name = name    # variable name
        self.value = value  # expression


class Literal(ASTNode):
    def __init__(self, value):
        self.value = value  # float


class Var(ASTNode):
    def __init__(self, name):
        self.name = name


class Binary(ASTNode):
    def __init__(self, left, op, right):
        self.left = left
        self.op = op
        self.right = right


class Negate(ASTNode):
    def __init__(self, expr):
        self.expr = expr


class Write(ASTNode):
    def __init__(self, args):
        self.args = args  # list[expr]


class Trace(ASTNode):
    def __init__(self, enabled: bool):
        self.enabled = enabled


class ExprStmt(ASTNode):
    def __init__(self, expr):
        self.expr = expr
