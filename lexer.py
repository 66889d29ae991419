class Token:
    def __init__(self, type, value=None, line=1, column=1):
        self.type = type
        self.value = value
        self.line = line
        self.column = column

    def __repr__(self):
        if self.value is not None:
            return f"{self.type}({self.value})"
        return f"{self.type}"


class Lexer:
    def __init__(self, text):
        self.text = text
        self.pos = 0
        self.current_char = text[0] if text else None
        self.line = 1
        self.column = 1

    def advance(self):
        # track line/column based on current_char before moving
        if self.current_char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.pos += 1
        if self.pos >= len(self.text):
            self.current_char = None
        else:
            self.current_char = self.text[self.pos]

    def peek(self):
        nxt = self.pos + 1
        if nxt >= len(self.text):
            return None
        return self.text[nxt]

    def peek_n(self, n):
        idx = self.pos + n
        if idx >= len(self.text):
            return None
        return self.text[idx]

    # skip spaces/tabs only (NOT newlines)
    def skip_whitespace(self):
        while self.current_char and self.current_char in " \t\r":
            self.advance()

    def skip_comment(self):
        while self.current_char and self.current_char != "\n":
            self.advance()

    def read_identifier(self):
        start_line, start_col = self.line, self.column
        result = ""
        while self.current_char and (self.current_char.isalnum() or self.current_char == "_"):
            result += self.current_char
            self.advance()
        if result == "write":
            return Token("WRITE", line=start_line, column=start_col)
        if result == "trace":
            return Token("TRACE", line=start_line, column=start_col)

        return Token("IDENT", result, line=start_line, column=start_col)

    def read_number(self):
        start_line, start_col = self.line, self.column
        result = ""
        has_dot = False

        while self.current_char and (self.current_char.isdigit() or self.current_char == "."):
            if self.current_char == ".":
                if has_dot:
                    break
                has_dot = True
            result += self.current_char
            self.advance()

        # exponent: 1e9, 2.5E-3
        if self.current_char in ("e", "E"):
            sign = self.peek()
            if sign is not None and sign.isdigit():
                digits_at = 1
            elif sign in ("+", "-") and (self.peek_n(2) or "").isdigit():
                digits_at = 2
            else:
                digits_at = 0
            if digits_at:
                for _ in range(digits_at):
                    result += self.current_char
                    self.advance()
                while self.current_char and self.current_char.isdigit():
                    result += self.current_char
                    self.advance()

        return Token("NUMBER", float(result), line=start_line, column=start_col)

    def get_next_token(self):
        while self.current_char:

            # NEWLINE is a real token (parser needs it)
            if self.current_char == "\n":
                start_line, start_col = self.line, self.column
                self.advance()
                return Token("NEWLINE", line=start_line, column=start_col)

            # spaces/tabs
            if self.current_char in " \t\r":
                self.skip_whitespace()
                continue

            # comments
            if self.current_char == "#":
                self.skip_comment()
                continue

            # identifiers / keywords
            if self.current_char.isalpha() or self.current_char == "_":
                return self.read_identifier()

            # numbers (".5" is allowed)
            if self.current_char.isdigit() or (self.current_char == "." and (self.peek() or "").isdigit()):
                return self.read_number()

            single = {
                "=": "ASSIGN",
                "+": "PLUS",
                "-": "MINUS",
                "*": "STAR",
                "/": "SLASH",
                ",": "COMMA",
                "(": "LPAREN",
                ")": "RPAREN",
            }
            if self.current_char in single:
                start_line, start_col = self.line, self.column
                token_type = single[self.current_char]
                self.advance()
                return Token(token_type, line=start_line, column=start_col)

            raise Exception(f"Unknown character: {self.current_char} at line {self.line}, col {self.column}")

        return Token("EOF", line=self.line, column=self.column)
