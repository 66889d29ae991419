from ast_nodes import Program, Assign, Literal, Var, Binary, Negate, Write, Trace, ExprStmt


class Parser:
    def __init__(self, lexer):
        self.lexer = lexer
        self.current_token = self.lexer.get_next_token()
        self.next_token = self.lexer.get_next_token()

    # move to next token, but only if it matches what we expect
    def eat(self, token_type):
        if self.current_token.type == token_type:
            self.current_token = self.next_token
            self.next_token = self.lexer.get_next_token()
        else:
            tok = self.current_token
            raise Exception(f"Expected {token_type}, got {tok.type} at line {tok.line}, col {tok.column}")

    def error_here(self, message):
        tok = self.current_token
        raise Exception(f"{message} at line {tok.line}, col {tok.column}")

    # ignore extra NEWLINEs so formatting can be flexible
    def skip_newlines(self):
        while self.current_token.type == "NEWLINE":
            self.eat("NEWLINE")

    # ---------- TOP LEVEL ----------
    def parse(self):
        statements = []
        self.skip_newlines()

        while self.current_token.type != "EOF":
            stmt = self.statement()
            statements.append(stmt)
            if self.current_token.type not in ("NEWLINE", "EOF"):
                self.error_here(f"Unexpected token after statement: {self.current_token.type}")
            self.skip_newlines()

        return Program(statements)

    # ---------- STATEMENTS ----------
    def statement(self):
        if self.current_token.type == "TRACE":
            return self.trace_statement()

        if self.current_token.type == "WRITE":
            return self.write_statement()

        # assignment: name = expr
        if self.current_token.type == "IDENT" and self.next_token.type == "ASSIGN":
            name_token = self.current_token
            self.eat("IDENT")
            self.eat("ASSIGN")
            node = Assign(name_token.value, self.expr())
            node.line = name_token.line
            return node

        tok = self.current_token
        node = ExprStmt(self.expr())
        node.line = tok.line
        return node

    def trace_statement(self):
        tok = self.current_token
        self.eat("TRACE")

        if self.current_token.type != "IDENT":
            self.error_here("trace expects 'on' or 'off'")

        mode = self.current_token.value
        self.eat("IDENT")
        if mode not in ("on", "off"):
            raise Exception(f"trace expects 'on' or 'off', got {mode} at line {tok.line}, col {tok.column}")

        node = Trace(enabled=(mode == "on"))
        node.line = tok.line
        return node

    def write_statement(self):
        tok = self.current_token
        self.eat("WRITE")
        self.eat("LPAREN")

        args = []
        if self.current_token.type != "RPAREN":
            args.append(self.expr())
            while self.current_token.type == "COMMA":
                self.eat("COMMA")
                args.append(self.expr())

        self.eat("RPAREN")
        node = Write(args)
        node.line = tok.line
        return node

    # ---------- EXPRESSIONS ----------
    # expr -> term ((+|-) term)*
    def expr(self):
        node = self.term()

        while self.current_token.type in ("PLUS", "MINUS"):
            op_token = self.current_token
            self.eat(op_token.type)
            right = self.term()
            node = Binary(node, self.op_token_to_text(op_token.type), right)
            node.line = op_token.line

        return node

    # term -> unary ((*|/) unary)*
    def term(self):
        node = self.unary()

        while self.current_token.type in ("STAR", "SLASH"):
            op_token = self.current_token
            self.eat(op_token.type)
            right = self.unary()
            node = Binary(node, self.op_token_to_text(op_token.type), right)
            node.line = op_token.line

        return node

    # unary -> (- unary) | primary
    def unary(self):
        if self.current_token.type == "MINUS":
            tok = self.current_token
            self.eat("MINUS")
            node = Negate(self.unary())
            node.line = tok.line
            return node
        return self.primary()

    # primary -> NUMBER | IDENT | (expr)
    def primary(self):
        tok = self.current_token

        if tok.type == "NUMBER":
            self.eat("NUMBER")
            node = Literal(tok.value)
            node.line = tok.line
            return node

        if tok.type == "IDENT":
            self.eat("IDENT")
            node = Var(tok.value)
            node.line = tok.line
            return node

        if tok.type == "LPAREN":
            self.eat("LPAREN")
            node = self.expr()
            self.eat("RPAREN")
            return node

        raise Exception(f"Unexpected token in expression: {tok.type} at line {tok.line}, col {tok.column}")

    # ---------- HELPERS ----------
    def op_token_to_text(self, op_type):
        mapping = {
            "PLUS": "+",
            "MINUS": "-",
            "STAR": "*",
            "SLASH": "/",
        }
        return mapping[op_type]
