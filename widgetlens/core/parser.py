"""
Parser — Recursive-descent parser from tokens to an immutable AST.

Never raises past `parse()`: a malformed statement or class member is recorded
as a ParseError and the parser resynchronizes at the next statement terminator
or at a token that starts a top-level declaration (`class`, `function`,
`import`). Binary operators use precedence climbing over BINARY_PRECEDENCE.
"""

from __future__ import annotations

import logging

from widgetlens.models import ast_nodes as ast
from widgetlens.models.issue_models import ParseError
from widgetlens.models.tokens import Token, TokenKind

logger = logging.getLogger("widgetlens.parser")

# Low to high. Logical operators produce LogicalExpression nodes.
BINARY_PRECEDENCE: dict[str, int] = {
    "||": 1, "??": 1,
    "&&": 2,
    "|": 3,
    "^": 4,
    "&": 5,
    "==": 6, "!=": 6, "===": 6, "!==": 6,
    "<": 7, ">": 7, "<=": 7, ">=": 7, "instanceof": 7,
    "+": 8, "-": 8,
    "*": 9, "/": 9, "%": 9,
    "**": 10,
}
LOGICAL_OPERATORS = frozenset({"||", "&&", "??"})
RIGHT_ASSOCIATIVE = frozenset({"**"})

ASSIGNMENT_OPERATORS = frozenset({"=", "+=", "-=", "*=", "/=", "%=", "**="})
PREFIX_OPERATORS = frozenset({"!", "-", "+", "~"})
PREFIX_KEYWORDS = frozenset({"typeof", "void", "delete", "await"})
DECLARATION_KEYWORDS = frozenset({"class", "function", "import"})

OPENERS = frozenset("([{")
CLOSERS = frozenset(")]}")


class _SyntaxFailure(Exception):
    """Raised inside the parser to unwind to the nearest recovery point."""

    def __init__(self, message: str, token: Token) -> None:
        super().__init__(message)
        self.message = message
        self.token = token


class Parser:
    """Parses one token stream. Create a new instance per file."""

    def __init__(self, tokens: list[Token]) -> None:
        if not tokens or tokens[-1].kind != TokenKind.EOF:
            last = tokens[-1] if tokens else None
            eof = Token(TokenKind.EOF, "", last.line if last else 1, last.column if last else 0)
            tokens = list(tokens) + [eof]
        self.tokens = tokens
        self.pos = 0
        self.errors: list[ParseError] = []
        self._context: list[str] = ["program"]

    # ── Public entry ──

    def parse(self) -> tuple[ast.Program, list[ParseError]]:
        body: list[ast.Node] = []
        while not self._at_end():
            start = self.pos
            try:
                body.extend(self._parse_top_level())
            except _SyntaxFailure as e:
                self._record(e.message, e.token)
                self._synchronize()
            except RecursionError:
                self._context = ["program"]
                self._record("Expression nesting too deep", self._peek())
                self._synchronize()
            if self.pos == start:
                self._advance()

        if self.errors:
            logger.debug(f"Parsed with {len(self.errors)} recoverable errors")
        return ast.Program(body=tuple(body), line=1, column=0), self.errors

    # ── Token helpers ──

    def _peek(self, offset: int = 0) -> Token:
        i = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[i]

    def _advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.kind != TokenKind.EOF:
            self.pos += 1
        return tok

    def _at_end(self) -> bool:
        return self._peek().kind == TokenKind.EOF

    def _check(self, kind: TokenKind, text: str | None = None, offset: int = 0) -> bool:
        return self._peek(offset).is_(kind, text)

    def _check_punct(self, text: str, offset: int = 0) -> bool:
        return self._check(TokenKind.PUNCTUATION, text, offset)

    def _check_op(self, text: str, offset: int = 0) -> bool:
        return self._check(TokenKind.OPERATOR, text, offset)

    def _check_keyword(self, text: str, offset: int = 0) -> bool:
        return self._check(TokenKind.KEYWORD, text, offset)

    def _match_punct(self, text: str) -> bool:
        if self._check_punct(text):
            self._advance()
            return True
        return False

    def _match_op(self, text: str) -> bool:
        if self._check_op(text):
            self._advance()
            return True
        return False

    def _expect_punct(self, text: str) -> Token:
        if not self._check_punct(text):
            self._fail(f"Expected {text!r} but found {self._describe(self._peek())}")
        return self._advance()

    def _expect_name(self, what: str) -> Token:
        if self._peek().kind != TokenKind.IDENTIFIER:
            self._fail(f"Expected {what} but found {self._describe(self._peek())}")
        return self._advance()

    def _fail(self, message: str, token: Token | None = None) -> None:
        raise _SyntaxFailure(message, token or self._peek())

    def _record(self, message: str, token: Token) -> None:
        self.errors.append(
            ParseError(
                message=message,
                line=token.line,
                column=token.column,
                context=self._context[-1],
            )
        )

    @staticmethod
    def _describe(token: Token) -> str:
        return "end of input" if token.kind == TokenKind.EOF else repr(token.text)

    @staticmethod
    def _pos(token: Token) -> dict[str, int]:
        return {"line": token.line, "column": token.column}

    def _at_declaration_start(self) -> bool:
        tok = self._peek()
        if tok.kind != TokenKind.KEYWORD:
            return False
        if tok.text in DECLARATION_KEYWORDS:
            return True
        return tok.text == "async" and self._check_keyword("function", 1)

    def _on_new_line(self) -> bool:
        prev = self.tokens[self.pos - 1] if self.pos > 0 else None
        return prev is not None and self._peek().line > prev.line

    # ── Recovery ──

    def _synchronize(self) -> None:
        """Skip to just past the next `;`, or stop before an unmatched `}` or
        a declaration keyword, whichever comes first at bracket depth 0."""
        depth = 0
        while not self._at_end():
            tok = self._peek()
            if tok.kind == TokenKind.PUNCTUATION:
                if tok.text in OPENERS:
                    depth += 1
                elif tok.text in CLOSERS:
                    if depth == 0:
                        if tok.text == "}":
                            return
                    else:
                        depth -= 1
                elif tok.text == ";" and depth == 0:
                    self._advance()
                    return
            elif depth == 0 and self._at_declaration_start():
                return
            self._advance()

    def _skip_member(self) -> None:
        """Skip a class member we could not interpret, including any body."""
        depth = 0
        while not self._at_end():
            tok = self._peek()
            if tok.is_(TokenKind.PUNCTUATION, "{") or tok.is_(TokenKind.PUNCTUATION, "(") \
                    or tok.is_(TokenKind.PUNCTUATION, "["):
                depth += 1
            elif tok.kind == TokenKind.PUNCTUATION and tok.text in CLOSERS:
                if depth == 0:
                    return
                depth -= 1
                if depth == 0 and tok.text == "}":
                    self._advance()
                    return
            elif tok.is_(TokenKind.PUNCTUATION, ";") and depth == 0:
                self._advance()
                return
            elif depth == 0 and self._at_declaration_start():
                return
            self._advance()

    # ── Top level ──

    def _parse_top_level(self) -> list[ast.Node]:
        tok = self._peek()
        if tok.is_(TokenKind.KEYWORD, "export"):
            self._advance()
            if self._check_keyword("default"):
                self._advance()
            return self._parse_top_level()
        if tok.is_(TokenKind.KEYWORD, "import"):
            return [self._parse_import()]
        if tok.is_(TokenKind.KEYWORD, "class"):
            return [self._parse_class()]
        if tok.is_(TokenKind.KEYWORD, "function") or (
            tok.is_(TokenKind.KEYWORD, "async") and self._check_keyword("function", 1)
        ):
            return [self._parse_function()]
        return self._parse_statement()

    def _parse_import(self) -> ast.ImportDeclaration:
        start = self._advance()
        specifiers: list[ast.ImportSpecifier] = []
        default_binding: str | None = None
        namespace: str | None = None

        if self._check(TokenKind.STRING):
            source = self._advance().text
            self._match_punct(";")
            return ast.ImportDeclaration(source=source, **self._pos(start))

        if self._peek().kind == TokenKind.IDENTIFIER:
            default_binding = self._advance().text
            self._match_punct(",")

        if self._match_op("*"):
            if not self._check_keyword("as"):
                self._fail("Expected 'as' after '*' in import")
            self._advance()
            namespace = self._expect_name("namespace name").text
        elif self._check_punct("{"):
            self._advance()
            while not self._check_punct("}"):
                name_tok = self._peek()
                if name_tok.kind not in (TokenKind.IDENTIFIER, TokenKind.KEYWORD):
                    self._fail(f"Expected import name but found {self._describe(name_tok)}")
                self._advance()
                local = name_tok.text
                if self._check_keyword("as"):
                    self._advance()
                    local = self._expect_name("import alias").text
                specifiers.append(
                    ast.ImportSpecifier(imported=name_tok.text, local=local, **self._pos(name_tok))
                )
                if not self._match_punct(","):
                    break
            self._expect_punct("}")

        if not self._check_keyword("from"):
            self._fail(f"Expected 'from' but found {self._describe(self._peek())}")
        self._advance()
        if not self._check(TokenKind.STRING):
            self._fail("Expected module specifier string")
        source = self._advance().text
        self._match_punct(";")
        return ast.ImportDeclaration(
            source=source,
            specifiers=tuple(specifiers),
            default_binding=default_binding,
            namespace=namespace,
            **self._pos(start),
        )

    def _parse_class(self) -> ast.ClassDeclaration:
        start = self._advance()
        name = self._expect_name("class name").text
        superclass: str | None = None
        type_arguments: tuple[str, ...] = ()

        self._context.append(f"class {name}")
        try:
            if self._check_keyword("extends"):
                self._advance()
                superclass = self._expect_name("superclass name").text
                while self._check_punct(".") and self._peek(1).kind == TokenKind.IDENTIFIER:
                    self._advance()
                    superclass += "." + self._advance().text
                if self._check_op("<"):
                    parsed = self._try_type_arguments()
                    if parsed is None:
                        self._fail("Malformed generic arguments after superclass")
                    type_arguments = parsed

            fields: list[ast.FieldDeclaration] = []
            methods: list[ast.MethodDeclaration] = []
            self._expect_punct("{")
            while not self._check_punct("}"):
                if self._at_end() or self._at_declaration_start():
                    self._record(f"Expected '}}' to close class {name}", self._peek())
                    break
                if self._match_punct(";"):
                    continue
                member_start = self.pos
                try:
                    member = self._parse_member()
                    if isinstance(member, ast.MethodDeclaration):
                        methods.append(member)
                    elif member is not None:
                        fields.append(member)
                except _SyntaxFailure as e:
                    self._record(e.message, e.token)
                    self._skip_member()
                if self.pos == member_start and not self._check_punct("}"):
                    self._advance()
            else:
                self._advance()

            return ast.ClassDeclaration(
                name=name,
                superclass=superclass,
                type_arguments=type_arguments,
                fields=tuple(fields),
                methods=tuple(methods),
                **self._pos(start),
            )
        finally:
            self._context.pop()

    def _parse_member(self) -> ast.FieldDeclaration | ast.MethodDeclaration | None:
        is_static = False
        is_async = False
        while True:
            if self._check_keyword("static") and not (
                self._check_punct("(", 1) or self._check_op("=", 1)
            ):
                self._advance()
                is_static = True
            elif self._check_keyword("async") and not (
                self._check_punct("(", 1) or self._check_op("=", 1)
            ):
                self._advance()
                is_async = True
            elif (
                self._peek().kind == TokenKind.IDENTIFIER
                and self._peek().text in ("get", "set")
                and self._peek(1).kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD)
            ):
                self._advance()
            else:
                break

        start = self._peek()
        if self._check_punct("#") and self._peek(1).kind == TokenKind.IDENTIFIER:
            self._advance()
            name = "#" + self._advance().text
        elif start.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD, TokenKind.STRING):
            name = self._advance().text
        else:
            self._fail(f"Unrecognized class member starting with {self._describe(start)}")

        if self._match_op("="):
            initializer = self._parse_assignment()
            self._match_punct(";")
            return ast.FieldDeclaration(
                name=name, initializer=initializer, is_static=is_static, **self._pos(start)
            )
        if self._check_punct("("):
            self._context.append(f"{self._context[-1]}.{name}")
            try:
                params = self._parse_params()
                body = self._parse_block()
            finally:
                self._context.pop()
            return ast.MethodDeclaration(
                name=name,
                params=params,
                body=body,
                is_static=is_static,
                is_async=is_async,
                **self._pos(start),
            )
        if self._match_punct(";") or self._check_punct("}") or self._on_new_line():
            return ast.FieldDeclaration(name=name, is_static=is_static, **self._pos(start))

        self._fail(f"Unrecognized class member {name!r}", start)
        return None

    def _parse_function(self) -> ast.FunctionDeclaration:
        start = self._peek()
        is_async = False
        if self._check_keyword("async"):
            self._advance()
            is_async = True
        self._advance()
        name = self._expect_name("function name").text
        self._context.append(f"function {name}")
        try:
            params = self._parse_params()
            body = self._parse_block()
        finally:
            self._context.pop()
        return ast.FunctionDeclaration(
            name=name, params=params, body=body, is_async=is_async, **self._pos(start)
        )

    def _parse_params(self) -> tuple[ast.Parameter, ...]:
        self._expect_punct("(")
        params: list[ast.Parameter] = []
        while not self._check_punct(")"):
            params.append(self._parse_param())
            if not self._match_punct(","):
                break
        self._expect_punct(")")
        return tuple(params)

    def _parse_param(self) -> ast.Parameter:
        start = self._peek()
        rest = self._match_op("...")
        if self._check_punct("{"):
            names = self._parse_object_pattern()
            default = self._parse_assignment() if self._match_op("=") else None
            return ast.Parameter(
                name="{}", default=default, destructured=names, rest=rest, **self._pos(start)
            )
        name = self._expect_name("parameter name").text
        default = self._parse_assignment() if self._match_op("=") else None
        return ast.Parameter(name=name, default=default, rest=rest, **self._pos(start))

    def _parse_object_pattern(self) -> tuple[str, ...]:
        self._expect_punct("{")
        names: list[str] = []
        while not self._check_punct("}"):
            self._match_op("...")
            key = self._peek()
            if key.kind not in (TokenKind.IDENTIFIER, TokenKind.KEYWORD, TokenKind.STRING):
                self._fail(f"Expected binding name but found {self._describe(key)}")
            self._advance()
            name = key.text
            if self._match_op(":"):
                name = self._expect_name("binding name").text
            if self._match_op("="):
                self._parse_assignment()
            names.append(name)
            if not self._match_punct(","):
                break
        self._expect_punct("}")
        return tuple(names)

    # ── Statements ──

    def _parse_block(self) -> ast.Block:
        start = self._expect_punct("{")
        body: list[ast.Node] = []
        while not self._check_punct("}"):
            if self._at_end() or self._at_declaration_start():
                self._record("Expected '}' to close block", self._peek())
                return ast.Block(body=tuple(body), **self._pos(start))
            stmt_start = self.pos
            try:
                body.extend(self._parse_statement())
            except _SyntaxFailure as e:
                self._record(e.message, e.token)
                self._synchronize()
            if self.pos == stmt_start and not self._check_punct("}"):
                self._advance()
        self._advance()
        return ast.Block(body=tuple(body), **self._pos(start))

    def _parse_statement(self) -> list[ast.Node]:
        tok = self._peek()

        if tok.is_(TokenKind.PUNCTUATION, ";"):
            self._advance()
            return []
        if tok.is_(TokenKind.PUNCTUATION, "{"):
            return [self._parse_block()]
        if tok.kind == TokenKind.KEYWORD:
            if tok.text == "return":
                return [self._parse_return()]
            if tok.text == "if":
                return [self._parse_if()]
            if tok.text in ("for", "while"):
                return [self._parse_loop()]
            if tok.text in ("let", "var") or (
                tok.text == "const" and not self._check_keyword("new", 1)
            ):
                return self._parse_variable_declaration()

        expr = self._parse_assignment()
        self._end_statement()
        return [ast.ExpressionStatement(expression=expr, **self._pos(tok))]

    def _end_statement(self) -> None:
        if self._match_punct(";") or self._check_punct("}") or self._at_end():
            return
        if self._on_new_line():
            return
        self._fail(f"Expected ';' but found {self._describe(self._peek())}")

    def _parse_return(self) -> ast.ReturnStatement:
        start = self._advance()
        argument = None
        if not (
            self._check_punct(";") or self._check_punct("}") or self._at_end()
            or self._on_new_line()
        ):
            argument = self._parse_assignment()
        self._end_statement()
        return ast.ReturnStatement(argument=argument, **self._pos(start))

    def _parse_if(self) -> ast.IfStatement:
        start = self._advance()
        self._expect_punct("(")
        test = self._parse_assignment()
        self._expect_punct(")")
        consequent = self._statement_as_node()
        alternate = None
        if self._check_keyword("else"):
            self._advance()
            alternate = self._statement_as_node()
        return ast.IfStatement(
            test=test, consequent=consequent, alternate=alternate, **self._pos(start)
        )

    def _parse_loop(self) -> ast.Block:
        # Loop headers are not modelled; the body is kept so its effects stay visible.
        start = self._advance()
        self._expect_punct("(")
        depth = 1
        while depth and not self._at_end():
            tok = self._advance()
            if tok.is_(TokenKind.PUNCTUATION, "("):
                depth += 1
            elif tok.is_(TokenKind.PUNCTUATION, ")"):
                depth -= 1
        body = self._statement_as_node()
        if isinstance(body, ast.Block):
            return body
        return ast.Block(body=(body,), **self._pos(start))

    def _statement_as_node(self) -> ast.Node:
        start = self._peek()
        nodes = self._parse_statement()
        if len(nodes) == 1:
            return nodes[0]
        return ast.Block(body=tuple(nodes), **self._pos(start))

    def _parse_variable_declaration(self) -> list[ast.Node]:
        kind = self._advance().text
        declarations: list[ast.Node] = []
        while True:
            name_tok = self._peek()
            if self._check_punct("{"):
                names = self._parse_object_pattern()
                initializer = self._parse_assignment() if self._match_op("=") else None
                for bound in names:
                    declarations.append(
                        ast.VariableDeclaration(
                            kind=kind, name=bound, initializer=initializer, **self._pos(name_tok)
                        )
                    )
            else:
                name = self._expect_name("variable name").text
                initializer = self._parse_assignment() if self._match_op("=") else None
                declarations.append(
                    ast.VariableDeclaration(
                        kind=kind, name=name, initializer=initializer, **self._pos(name_tok)
                    )
                )
            if not self._match_punct(","):
                break
        self._end_statement()
        return declarations

    # ── Expressions ──

    def _parse_assignment(self) -> ast.Node:
        start = self._peek()
        target = self._parse_conditional()
        tok = self._peek()
        if tok.kind == TokenKind.OPERATOR and tok.text in ASSIGNMENT_OPERATORS:
            if not isinstance(target, (ast.Identifier, ast.MemberExpression, ast.IndexExpression)):
                self._fail("Invalid assignment target", tok)
            self._advance()
            value = self._parse_assignment()
            return ast.AssignmentExpression(
                operator=tok.text, target=target, value=value, **self._pos(start)
            )
        return target

    def _parse_conditional(self) -> ast.Node:
        start = self._peek()
        test = self._parse_binary(1)
        if self._check_op("?"):
            self._advance()
            consequent = self._parse_assignment()
            if not self._match_op(":"):
                self._fail("Expected ':' in conditional expression")
            alternate = self._parse_assignment()
            return ast.ConditionalExpression(
                test=test, consequent=consequent, alternate=alternate, **self._pos(start)
            )
        return test

    def _binary_operator(self) -> str | None:
        tok = self._peek()
        if tok.kind == TokenKind.OPERATOR and tok.text in BINARY_PRECEDENCE:
            return tok.text
        if tok.is_(TokenKind.KEYWORD, "instanceof"):
            return "instanceof"
        return None

    def _parse_binary(self, min_precedence: int) -> ast.Node:
        start = self._peek()
        left = self._parse_unary()
        while True:
            op = self._binary_operator()
            if op is None or BINARY_PRECEDENCE[op] < min_precedence:
                return left
            precedence = BINARY_PRECEDENCE[op]
            self._advance()
            next_min = precedence if op in RIGHT_ASSOCIATIVE else precedence + 1
            right = self._parse_binary(next_min)
            node_type = ast.LogicalExpression if op in LOGICAL_OPERATORS else ast.BinaryExpression
            left = node_type(operator=op, left=left, right=right, **self._pos(start))

    def _parse_unary(self) -> ast.Node:
        tok = self._peek()
        if tok.kind == TokenKind.OPERATOR and tok.text in PREFIX_OPERATORS:
            self._advance()
            return ast.UnaryExpression(
                operator=tok.text, argument=self._parse_unary(), **self._pos(tok)
            )
        if tok.kind == TokenKind.KEYWORD and tok.text in PREFIX_KEYWORDS:
            self._advance()
            return ast.UnaryExpression(
                operator=tok.text, argument=self._parse_unary(), **self._pos(tok)
            )
        if tok.kind == TokenKind.OPERATOR and tok.text in ("++", "--"):
            self._advance()
            return ast.UpdateExpression(
                operator=tok.text, argument=self._parse_unary(), prefix=True, **self._pos(tok)
            )
        return self._parse_postfix()

    def _parse_postfix(self) -> ast.Node:
        start = self._peek()
        expr = self._parse_primary()
        while True:
            tok = self._peek()
            if tok.is_(TokenKind.PUNCTUATION, ".") or tok.is_(TokenKind.OPERATOR, ".."):
                # A cascade is kept as plain member access on its receiver
                self._advance()
                expr = ast.MemberExpression(
                    object=expr, property=self._property_name(), **self._pos(start)
                )
            elif tok.is_(TokenKind.OPERATOR, "?."):
                self._advance()
                if self._check_punct("("):
                    expr = ast.CallExpression(
                        callee=expr, arguments=self._parse_arguments(), **self._pos(start)
                    )
                elif self._match_punct("["):
                    index = self._parse_assignment()
                    self._expect_punct("]")
                    expr = ast.IndexExpression(object=expr, index=index, **self._pos(start))
                else:
                    expr = ast.MemberExpression(
                        object=expr, property=self._property_name(), optional=True,
                        **self._pos(start),
                    )
            elif tok.is_(TokenKind.PUNCTUATION, "["):
                self._advance()
                index = self._parse_assignment()
                self._expect_punct("]")
                expr = ast.IndexExpression(object=expr, index=index, **self._pos(start))
            elif tok.is_(TokenKind.PUNCTUATION, "("):
                expr = ast.CallExpression(
                    callee=expr, arguments=self._parse_arguments(), **self._pos(start)
                )
            elif tok.is_(TokenKind.OPERATOR, "<") and isinstance(
                expr, (ast.Identifier, ast.MemberExpression)
            ):
                saved = self.pos
                type_arguments = self._try_type_arguments()
                if type_arguments is None or not self._check_punct("("):
                    self.pos = saved
                    return expr
                expr = ast.CallExpression(
                    callee=expr,
                    arguments=self._parse_arguments(),
                    type_arguments=type_arguments,
                    **self._pos(start),
                )
            elif tok.kind == TokenKind.OPERATOR and tok.text in ("++", "--") \
                    and not self._on_new_line():
                self._advance()
                return ast.UpdateExpression(
                    operator=tok.text, argument=expr, prefix=False, **self._pos(start)
                )
            else:
                return expr

    def _property_name(self) -> str:
        tok = self._peek()
        if tok.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD, TokenKind.BOOLEAN,
                        TokenKind.NULL, TokenKind.UNDEFINED):
            return self._advance().text
        if tok.is_(TokenKind.PUNCTUATION, "#") and self._peek(1).kind == TokenKind.IDENTIFIER:
            self._advance()
            return "#" + self._advance().text
        self._fail(f"Expected property name but found {self._describe(tok)}")
        return ""

    def _parse_arguments(self) -> tuple[ast.Node, ...]:
        self._expect_punct("(")
        args: list[ast.Node] = []
        while not self._check_punct(")"):
            if self._check_op("..."):
                spread = self._advance()
                args.append(ast.SpreadElement(argument=self._parse_assignment(), **self._pos(spread)))
            else:
                args.append(self._parse_assignment())
            if not self._match_punct(","):
                break
        self._expect_punct(")")
        return tuple(args)

    def _try_type_arguments(self) -> tuple[str, ...] | None:
        """Speculatively parse `<A, B<C>>`; restore position and return None on failure."""
        saved = self.pos
        try:
            return self._parse_type_arguments()
        except _SyntaxFailure:
            self.pos = saved
            return None

    def _parse_type_arguments(self) -> tuple[str, ...]:
        if not self._match_op("<"):
            self._fail("Expected '<'")
        names: list[str] = []
        while True:
            names.append(self._parse_type())
            if not self._match_punct(","):
                break
        if not self._match_op(">"):
            self._fail("Expected '>'")
        return tuple(names)

    def _parse_type(self) -> str:
        name = self._expect_name("type name").text
        while self._check_punct(".") and self._peek(1).kind == TokenKind.IDENTIFIER:
            self._advance()
            name += "." + self._advance().text
        if self._check_op("<"):
            inner = self._parse_type_arguments()
            name += "<" + ", ".join(inner) + ">"
        while self._check_punct("[") and self._check_punct("]", 1):
            self._advance()
            self._advance()
            name += "[]"
        return name

    def _parse_primary(self) -> ast.Node:
        tok = self._peek()
        pos = self._pos(tok)

        if tok.kind == TokenKind.STRING:
            self._advance()
            return ast.Literal(kind="string", value=tok.text, raw=tok.text, **pos)
        if tok.kind == TokenKind.NUMBER:
            self._advance()
            return ast.Literal(kind="number", value=_number_value(tok.text), raw=tok.text, **pos)
        if tok.kind == TokenKind.BOOLEAN:
            self._advance()
            return ast.Literal(kind="boolean", value=tok.text == "true", raw=tok.text, **pos)
        if tok.kind == TokenKind.NULL:
            self._advance()
            return ast.Literal(kind="null", value=None, raw=tok.text, **pos)
        if tok.kind == TokenKind.UNDEFINED:
            self._advance()
            return ast.Literal(kind="undefined", value=None, raw=tok.text, **pos)

        if tok.kind == TokenKind.IDENTIFIER:
            if self._check_op("=>", 1):
                self._advance()
                param = ast.Parameter(name=tok.text, **pos)
                return self._parse_arrow_body((param,), tok)
            self._advance()
            return ast.Identifier(name=tok.text, **pos)

        if tok.kind == TokenKind.KEYWORD:
            if tok.text == "this":
                self._advance()
                return ast.ThisExpression(**pos)
            if tok.text == "new":
                return self._parse_new(is_const=False)
            if tok.text == "const" and self._check_keyword("new", 1):
                self._advance()
                return self._parse_new(is_const=True, start=tok)
            if tok.text == "function":
                self._advance()
                if self._peek().kind == TokenKind.IDENTIFIER:
                    self._advance()
                params = self._parse_params()
                return ast.ArrowFunction(params=params, body=self._parse_block(), **pos)
            if tok.text == "async":
                if self._peek(1).kind == TokenKind.IDENTIFIER and self._check_op("=>", 2):
                    self._advance()
                    param_tok = self._advance()
                    param = ast.Parameter(name=param_tok.text, **self._pos(param_tok))
                    return self._parse_arrow_body((param,), tok, is_async=True)
                if self._check_punct("(", 1) and self._is_arrow_ahead(self.pos + 1):
                    self._advance()
                    return self._parse_arrow_body(self._parse_params(), tok, is_async=True)
            if tok.text == "constructor":
                self._advance()
                return ast.Identifier(name=tok.text, **pos)

        if tok.is_(TokenKind.PUNCTUATION, "("):
            if self._is_arrow_ahead(self.pos):
                return self._parse_arrow_body(self._parse_params(), tok)
            self._advance()
            expr = self._parse_assignment()
            self._expect_punct(")")
            return expr

        if tok.is_(TokenKind.PUNCTUATION, "["):
            return self._parse_array()
        if tok.is_(TokenKind.PUNCTUATION, "{"):
            return self._parse_object()

        self._fail(f"Unexpected {self._describe(tok)} in expression")
        return ast.Identifier(name="", **pos)

    def _is_arrow_ahead(self, open_index: int) -> bool:
        """True when the `(` at open_index closes with `)` followed by `=>`."""
        depth = 0
        i = open_index
        while i < len(self.tokens):
            tok = self.tokens[i]
            if tok.kind == TokenKind.EOF:
                return False
            if tok.kind == TokenKind.PUNCTUATION:
                if tok.text in OPENERS:
                    depth += 1
                elif tok.text in CLOSERS:
                    depth -= 1
                    if depth == 0:
                        nxt = self.tokens[i + 1] if i + 1 < len(self.tokens) else tok
                        return nxt.is_(TokenKind.OPERATOR, "=>")
            i += 1
        return False

    def _parse_arrow_body(
        self,
        params: tuple[ast.Parameter, ...],
        start: Token,
        is_async: bool = False,
    ) -> ast.ArrowFunction:
        if not self._match_op("=>"):
            self._fail("Expected '=>'")
        if self._check_punct("{"):
            body: ast.Node = self._parse_block()
        else:
            body = self._parse_assignment()
        return ast.ArrowFunction(params=params, body=body, is_async=is_async, **self._pos(start))

    def _parse_new(self, is_const: bool, start: Token | None = None) -> ast.NewExpression:
        new_tok = self._advance()
        start = start or new_tok
        name_tok = self._expect_name("constructor name")
        callee: ast.Node = ast.Identifier(name=name_tok.text, **self._pos(name_tok))
        while self._check_punct("."):
            self._advance()
            callee = ast.MemberExpression(
                object=callee, property=self._property_name(), **self._pos(name_tok)
            )
        type_arguments: tuple[str, ...] = ()
        if self._check_op("<"):
            parsed = self._try_type_arguments()
            if parsed is None:
                self._fail("Malformed generic arguments in 'new' expression")
            type_arguments = parsed
        arguments = self._parse_arguments() if self._check_punct("(") else ()
        return ast.NewExpression(
            callee=callee,
            arguments=arguments,
            type_arguments=type_arguments,
            is_const=is_const,
            **self._pos(start),
        )

    def _parse_array(self) -> ast.ArrayLiteral:
        start = self._advance()
        elements: list[ast.Node] = []
        while not self._check_punct("]"):
            if self._check_punct(","):
                self._advance()
                continue
            if self._check_op("..."):
                spread = self._advance()
                elements.append(
                    ast.SpreadElement(argument=self._parse_assignment(), **self._pos(spread))
                )
            else:
                elements.append(self._parse_assignment())
            if not self._match_punct(","):
                break
        self._expect_punct("]")
        return ast.ArrayLiteral(elements=tuple(elements), **self._pos(start))

    def _parse_object(self) -> ast.ObjectLiteral:
        start = self._advance()
        properties: list[ast.Node] = []
        while not self._check_punct("}"):
            properties.append(self._parse_property())
            if not self._match_punct(","):
                break
        self._expect_punct("}")
        return ast.ObjectLiteral(properties=tuple(properties), **self._pos(start))

    def _parse_property(self) -> ast.Node:
        tok = self._peek()
        pos = self._pos(tok)

        if tok.is_(TokenKind.OPERATOR, "..."):
            self._advance()
            return ast.SpreadElement(argument=self._parse_assignment(), **pos)

        key: str | None = None
        computed_key: ast.Node | None = None
        if tok.is_(TokenKind.PUNCTUATION, "["):
            self._advance()
            computed_key = self._parse_assignment()
            self._expect_punct("]")
        elif tok.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD, TokenKind.STRING,
                          TokenKind.NUMBER, TokenKind.BOOLEAN, TokenKind.NULL,
                          TokenKind.UNDEFINED):
            self._advance()
            key = tok.text
        else:
            self._fail(f"Expected property key but found {self._describe(tok)}")

        if self._match_op(":"):
            value = self._parse_assignment()
            return ast.Property(key=key, value=value, computed_key=computed_key, **pos)
        if self._check_punct("("):
            params = self._parse_params()
            body = self._parse_block()
            value = ast.ArrowFunction(params=params, body=body, **pos)
            return ast.Property(key=key, value=value, computed_key=computed_key, **pos)
        if key is not None and tok.kind == TokenKind.IDENTIFIER:
            return ast.Property(
                key=key, value=ast.Identifier(name=key, **pos), shorthand=True, **pos
            )
        self._fail(f"Expected ':' after property key {tok.text!r}")
        return ast.Property(key=key, value=ast.Identifier(name="", **pos), **pos)


def _number_value(text: str) -> int | float:
    try:
        return int(text)
    except ValueError:
        return float(text)


def parse(tokens: list[Token]) -> tuple[ast.Program, list[ParseError]]:
    """
    Parse a token stream.

    Args:
        tokens: Output of the lexer (an EOF token is appended if missing).

    Returns:
        (Program, recorded parse errors). Never raises on malformed input.
    """
    return Parser(tokens).parse()
