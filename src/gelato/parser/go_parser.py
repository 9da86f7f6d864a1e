"""
tree-sitter based Go parser.

Converts the concrete syntax tree of a Go source file into the closed Go AST
of gelato.goast. Declarations and types are modelled node by node; function
bodies are kept verbatim together with the positions of their package-call
roots, which is all the rewriting passes need.
"""

import bisect
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from tree_sitter import Language, Node, Parser
import tree_sitter_go as tsgo

from gelato.exceptions import GoModuleError, ParserError
from gelato.goast import nodes as go
from gelato.logging_config import logger
from .config import (
    GO_MOD_FILE,
    INTERFACE_EMBED_NODES,
    INTERFACE_METHOD_NODES,
    MODULE_DIRECTIVE,
    SCOPE_NODES,
)

GO_LANGUAGE = Language(tsgo.language())

_parser: Optional[Parser] = None


def _get_parser() -> Parser:
    global _parser
    if _parser is None:
        _parser = Parser()
        _parser.language = GO_LANGUAGE
        logger.debug("Initialized tree-sitter Go parser")
    return _parser


class PositionTable:
    """Maps byte offsets of a source file to 1-based line:column positions."""

    def __init__(self, source: bytes):
        self._line_starts = [0] + [m.end() for m in re.finditer(b"\n", source)]

    def line_col(self, offset: int) -> Tuple[int, int]:
        line = bisect.bisect_right(self._line_starts, offset)
        return line, offset - self._line_starts[line - 1] + 1

    def position(self, offset: int) -> str:
        line, col = self.line_col(offset)
        return f"{line}:{col}"


@dataclass
class ParsedFile:
    path: Path
    ast: go.File
    positions: PositionTable


def parse_file(file_path: Path) -> ParsedFile:
    """Reads and parses one Go file. I/O errors propagate unchanged."""
    logger.debug(f"Parsing Go file: {file_path}")
    source = file_path.read_bytes()
    return ParsedFile(
        path=file_path,
        ast=parse_source(source, str(file_path)),
        positions=PositionTable(source),
    )


def parse_source(source, file_path: str = "<source>") -> go.File:
    """
    Parses Go source (str or bytes) into a File node.

    Raises:
        ParserError: the source has a syntax error or no package clause.
    """
    if isinstance(source, str):
        source = source.encode("utf-8")
    tree = _get_parser().parse(source)
    root = tree.root_node
    if root.has_error:
        bad = _first_error(root)
        line, col = PositionTable(source).line_col(bad.start_byte if bad else 0)
        what = f"missing {bad.type}" if bad is not None and bad.is_missing else "syntax error"
        raise ParserError(file_path, f"{what} at {line}:{col}")
    return _FileBuilder(source, file_path).build(root)


def _first_error(node: Node) -> Optional[Node]:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


def read_go_module(directory: Path) -> str:
    """
    Returns the module path declared by <directory>/go.mod.

    Raises:
        FileNotFoundError: go.mod does not exist.
        GoModuleError: go.mod has no module directive.
    """
    go_mod = directory / GO_MOD_FILE
    content = go_mod.read_text(encoding="utf-8")
    for line in content.splitlines():
        stripped = line.split("//", 1)[0].strip()
        if not stripped.startswith(MODULE_DIRECTIVE):
            continue
        name = stripped[len(MODULE_DIRECTIVE):].strip().strip('"`')
        if name:
            return name
    raise GoModuleError(str(go_mod))


class _FileBuilder:
    """Walks one tree-sitter source_file node and builds the Go AST."""

    def __init__(self, source: bytes, file_path: str):
        self.source = source
        self.file_path = file_path

    def text(self, node: Node) -> str:
        return self.source[node.start_byte:node.end_byte].decode("utf-8")

    def build(self, root: Node) -> go.File:
        package = None
        decls: List[go.Decl] = []
        comments: List[Node] = []
        last_row = -1

        for child in root.named_children:
            if child.type == "comment":
                # trailing comments belong to the previous line
                if child.start_point[0] != last_row:
                    comments.append(child)
                continue
            doc = self._doc_for(child, comments)
            comments = []
            last_row = child.end_point[0]

            if child.type == "package_clause":
                package = self.text(child.named_children[0])
            elif child.type == "import_declaration":
                decls.append(self._import_decl(child))
            elif child.type == "type_declaration":
                decls.append(self._type_decl(child, doc))
            elif child.type in ("function_declaration", "method_declaration"):
                decls.append(self._func_decl(child, doc))
            elif child.type in ("const_declaration", "var_declaration"):
                text = self.text(child)
                if doc:
                    text = doc + "\n" + text
                tok = "const" if child.type == "const_declaration" else "var"
                decls.append(go.SourceDecl(
                    tok=tok, text=text, pos=child.start_byte, refs=self._package_refs(child),
                ))
            else:
                logger.debug(f"Skipping top-level {child.type} in {self.file_path}")

        if package is None:
            raise ParserError(self.file_path, "missing package clause")
        return go.File(package=package, decls=tuple(decls))

    def _doc_for(self, node: Node, comments: List[Node]) -> Optional[str]:
        """Comments directly above node, without blank lines in between."""
        doc: List[Node] = []
        expected_row = node.start_point[0] - 1
        for comment in reversed(comments):
            if comment.end_point[0] != expected_row:
                break
            doc.insert(0, comment)
            expected_row = comment.start_point[0] - 1
        if not doc:
            return None
        return "\n".join(self.text(c) for c in doc)

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _import_decl(self, node: Node) -> go.GenDecl:
        specs = []
        for child in node.named_children:
            if child.type == "import_spec":
                specs.append(self._import_spec(child))
            elif child.type == "import_spec_list":
                specs.extend(
                    self._import_spec(s) for s in child.named_children if s.type == "import_spec"
                )
        return go.GenDecl(tok="import", specs=tuple(specs))

    def _import_spec(self, node: Node) -> go.ImportSpec:
        path = self.text(node.child_by_field_name("path"))[1:-1]
        name_node = node.child_by_field_name("name")
        return go.ImportSpec(path=path, name=self.text(name_node) if name_node else None)

    def _type_decl(self, node: Node, doc: Optional[str]) -> go.GenDecl:
        specs = []
        comments: List[Node] = []
        for child in node.named_children:
            if child.type == "comment":
                comments.append(child)
                continue
            if child.type not in ("type_spec", "type_alias"):
                continue
            spec_doc = self._doc_for(child, comments) or doc
            comments = []
            doc = None
            type_params = child.child_by_field_name("type_parameters")
            specs.append(go.TypeSpec(
                name=self.text(child.child_by_field_name("name")),
                type=self.type_expr(child.child_by_field_name("type")),
                alias=child.type == "type_alias",
                type_params=self.text(type_params) if type_params else None,
                doc=spec_doc,
                pos=child.start_byte,
            ))
        return go.GenDecl(tok="type", specs=tuple(specs))

    def _func_decl(self, node: Node, doc: Optional[str]) -> go.FuncDecl:
        recv = None
        if node.type == "method_declaration":
            recv = self.params(node.child_by_field_name("receiver"))
        type_params = node.child_by_field_name("type_parameters")
        body = node.child_by_field_name("body")
        return go.FuncDecl(
            name=self.text(node.child_by_field_name("name")),
            type=self.signature(node),
            recv=recv,
            type_params=self.text(type_params) if type_params else None,
            body=self._source_block(body) if body is not None else None,
            doc=doc,
            pos=node.start_byte,
        )

    def _source_block(self, node: Node) -> go.SourceBlock:
        base = node.start_byte
        roots = []
        refs = []
        local_names = []
        stack = [node]
        while stack:
            current = stack.pop()
            kind = current.type
            if kind == "call_expression":
                fn = current.child_by_field_name("function")
                if fn is not None and fn.type == "selector_expression":
                    operand = fn.child_by_field_name("operand")
                    if operand is not None and operand.type == "identifier":
                        roots.append(self._name_ref(base, operand))
                        # fn is already recorded as a call root
                        stack.extend(c for c in current.named_children if c != fn)
                        continue
            elif kind == "selector_expression":
                operand = current.child_by_field_name("operand")
                if operand is not None and operand.type == "identifier":
                    refs.append(self._name_ref(base, operand))
            elif kind == "qualified_type":
                refs.append(self._name_ref(base, current.child_by_field_name("package")))
            local_names.extend(self._declared_names(base, current))
            stack.extend(current.named_children)
        roots.sort(key=lambda r: r.start)
        refs.sort(key=lambda r: r.start)
        local_names.sort(key=lambda n: n.scope)
        return go.SourceBlock(
            text=self.text(node),
            call_roots=tuple(roots),
            selector_refs=tuple(refs),
            locals=tuple(local_names),
        )

    def _name_ref(self, base: int, node: Node) -> go.NameRef:
        return go.NameRef(
            start=self._char_offset(base, node.start_byte),
            end=self._char_offset(base, node.end_byte),
            name=self.text(node),
        )

    def _declared_names(self, base: int, node: Node) -> List[go.LocalName]:
        """Names node declares, each in scope from the end of its declaring clause."""
        kind = node.type
        if kind == "short_var_declaration":
            names = node.child_by_field_name("left").named_children
            start = node.end_byte
        elif kind == "range_clause":
            left = node.child_by_field_name("left")
            if left is None or not any(c.type == ":=" for c in node.children):
                return []
            names = left.named_children
            start = node.end_byte
        elif kind in ("var_spec", "const_spec"):
            names = node.children_by_field_name("name")
            start = node.end_byte
        elif kind == "type_switch_statement":
            alias = node.child_by_field_name("alias")
            if alias is None:
                return []
            names = alias.named_children
            start = node.child_by_field_name("value").end_byte
        elif kind == "func_literal":
            params = node.child_by_field_name("parameters")
            names = [
                n for decl in params.named_children
                for n in decl.children_by_field_name("name")
            ]
            start = params.end_byte
        else:
            return []
        scope = self._char_offset(base, start)
        end = self._char_offset(base, self._scope_end(node))
        return [go.LocalName(self.text(n), scope, end) for n in names if n.type == "identifier"]

    @staticmethod
    def _scope_end(node: Node) -> int:
        if node.type in ("func_literal", "type_switch_statement"):
            return node.end_byte
        current = node.parent
        while current is not None and current.type not in SCOPE_NODES:
            current = current.parent
        return current.end_byte if current is not None else node.end_byte

    def _package_refs(self, node: Node) -> Tuple[str, ...]:
        """Selector roots and qualified type packages anywhere below node."""
        refs = set()
        stack = [node]
        while stack:
            current = stack.pop()
            if current.type == "selector_expression":
                operand = current.child_by_field_name("operand")
                if operand is not None and operand.type == "identifier":
                    refs.add(self.text(operand))
            elif current.type == "qualified_type":
                refs.add(self.text(current.child_by_field_name("package")))
            stack.extend(current.named_children)
        return tuple(sorted(refs))

    def _char_offset(self, base: int, offset: int) -> int:
        return len(self.source[base:offset].decode("utf-8"))

    # ------------------------------------------------------------------
    # Signatures and types
    # ------------------------------------------------------------------

    def signature(self, node: Node) -> go.FuncType:
        """Builds a FuncType from any node with parameters/result fields."""
        params = self.params(node.child_by_field_name("parameters"))
        result = node.child_by_field_name("result")
        if result is None:
            results = go.FieldList()
        elif result.type == "parameter_list":
            results = self.params(result)
        else:
            results = go.FieldList((go.Field(names=(), type=self.type_expr(result)),))
        return go.FuncType(params=params, results=results)

    def params(self, node: Optional[Node]) -> go.FieldList:
        if node is None:
            return go.FieldList()
        fields = []
        for child in node.named_children:
            if child.type == "parameter_declaration":
                names = tuple(self.text(n) for n in child.children_by_field_name("name"))
                fields.append(go.Field(names=names, type=self.type_expr(child.child_by_field_name("type"))))
            elif child.type == "variadic_parameter_declaration":
                name = child.child_by_field_name("name")
                fields.append(go.Field(
                    names=(self.text(name),) if name else (),
                    type=go.Ellipsis(self.type_expr(child.child_by_field_name("type"))),
                ))
        return go.FieldList(tuple(fields))

    def type_expr(self, node: Node) -> go.Expr:
        kind = node.type
        if kind in ("type_identifier", "identifier", "package_identifier", "field_identifier"):
            return go.Ident(self.text(node))
        if kind == "qualified_type":
            return go.SelectorExpr(
                go.Ident(self.text(node.child_by_field_name("package"))),
                self.text(node.child_by_field_name("name")),
            )
        if kind == "pointer_type":
            return go.StarExpr(self.type_expr(node.named_children[0]))
        if kind == "slice_type":
            return go.ArrayType(elt=self.type_expr(node.child_by_field_name("element")))
        if kind == "array_type":
            length = self._length_expr(node.child_by_field_name("length"))
            return go.ArrayType(elt=self.type_expr(node.child_by_field_name("element")), length=length)
        if kind == "implicit_length_array_type":
            return go.ArrayType(elt=self.type_expr(node.child_by_field_name("element")), length=go.RawExpr("..."))
        if kind == "map_type":
            return go.MapType(
                key=self.type_expr(node.child_by_field_name("key")),
                value=self.type_expr(node.child_by_field_name("value")),
            )
        if kind == "channel_type":
            return self._chan_type(node)
        if kind == "function_type":
            return self.signature(node)
        if kind == "struct_type":
            return go.StructType(self._struct_fields(node))
        if kind == "interface_type":
            return go.InterfaceType(self._interface_methods(node))
        if kind == "generic_type":
            args = node.child_by_field_name("type_arguments")
            indices = tuple(self.type_expr(a) for a in args.named_children) if args else ()
            return go.IndexExpr(self.type_expr(node.child_by_field_name("type")), indices)
        if kind in ("parenthesized_type",) + INTERFACE_EMBED_NODES and node.named_child_count == 1:
            return self.type_expr(node.named_children[0])
        return go.RawExpr(self.text(node))

    def _length_expr(self, node: Node) -> go.Expr:
        """Array length: literals, constants, pkg.Const and arithmetic over them."""
        kind = node.type
        if kind == "int_literal":
            return go.BasicLit("INT", self.text(node))
        if kind == "identifier":
            return go.Ident(self.text(node))
        if kind == "selector_expression":
            operand = node.child_by_field_name("operand")
            if operand.type == "identifier":
                return go.SelectorExpr(go.Ident(self.text(operand)), self.text(node.child_by_field_name("field")))
        if kind == "parenthesized_expression" and node.named_child_count == 1:
            return go.ParenExpr(self._length_expr(node.named_children[0]))
        if kind == "binary_expression":
            return go.BinaryExpr(
                self._length_expr(node.child_by_field_name("left")),
                self.text(node.child_by_field_name("operator")),
                self._length_expr(node.child_by_field_name("right")),
            )
        return go.RawExpr(self.text(node))

    def _chan_type(self, node: Node) -> go.ChanType:
        tokens = [c.type for c in node.children if not c.is_named]
        if tokens[:1] == ["<-"]:
            direction = go.CHAN_RECV
        elif tokens[:2] == ["chan", "<-"]:
            direction = go.CHAN_SEND
        else:
            direction = go.CHAN_BOTH
        return go.ChanType(value=self.type_expr(node.child_by_field_name("value")), dir=direction)

    def _struct_fields(self, node: Node) -> go.FieldList:
        fields = []
        field_list = next((c for c in node.named_children if c.type == "field_declaration_list"), None)
        if field_list is None:
            return go.FieldList()
        for decl in field_list.named_children:
            if decl.type != "field_declaration":
                continue
            names = tuple(self.text(n) for n in decl.children_by_field_name("name"))
            type_expr = self.type_expr(decl.child_by_field_name("type"))
            if not names and any(c.type == "*" for c in decl.children):
                type_expr = go.StarExpr(type_expr)
            tag = decl.child_by_field_name("tag")
            fields.append(go.Field(names=names, type=type_expr, tag=self.text(tag) if tag else None))
        return go.FieldList(tuple(fields))

    def _interface_methods(self, node: Node) -> go.FieldList:
        methods = []
        for child in node.named_children:
            if child.type in INTERFACE_METHOD_NODES:
                name = self.text(child.child_by_field_name("name"))
                methods.append(go.Field(names=(name,), type=self.signature(child)))
            elif child.type in INTERFACE_EMBED_NODES:
                methods.append(go.Field(names=(), type=self.type_expr(child)))
        return go.FieldList(tuple(methods))
