"""
Renders Go AST nodes to Go source text.

Output follows gofmt layout closely enough that formatting is a no-op for most
synthesized files, which keeps emission working when no Go toolchain is
installed.
"""

from typing import List, Optional

from . import nodes as go

INDENT = "\t"


def print_file(file: go.File) -> str:
    """Returns the complete source text of a file, ending with a newline."""
    chunks = [f"package {file.package}"]
    for decl in file.decls:
        text = print_decl(decl)
        if text:
            chunks.append(text)
    return "\n\n".join(chunks) + "\n"


def print_decl(decl: go.Decl) -> Optional[str]:
    if isinstance(decl, go.GenDecl):
        return _print_gen_decl(decl)
    if isinstance(decl, go.FuncDecl):
        return _print_func_decl(decl)
    if isinstance(decl, go.SourceDecl):
        return decl.text
    raise TypeError(f"unsupported declaration: {type(decl).__name__}")


def _print_gen_decl(decl: go.GenDecl) -> Optional[str]:
    if not decl.specs:
        return None

    if decl.tok == "import":
        specs = [_print_import_spec(s) for s in decl.specs]
        if len(specs) == 1:
            return f"import {specs[0]}"
        return "import (\n" + "\n".join(INDENT + s for s in specs) + "\n)"

    if len(decl.specs) == 1:
        return _print_type_spec(decl.specs[0], 0, keyword=True)
    body = "\n".join(_print_type_spec(s, 1, keyword=False) for s in decl.specs)
    return f"type (\n{body}\n)"


def _print_import_spec(spec: go.ImportSpec) -> str:
    if spec.name:
        return f'{spec.name} "{spec.path}"'
    return f'"{spec.path}"'


def _print_type_spec(spec: go.TypeSpec, indent: int, keyword: bool) -> str:
    prefix = INDENT * indent
    lines = []
    if spec.doc:
        lines.extend(prefix + line.strip() for line in spec.doc.splitlines())
    head = "type " if keyword else ""
    assign = " = " if spec.alias else " "
    type_params = spec.type_params or ""
    lines.append(f"{prefix}{head}{spec.name}{type_params}{assign}{print_expr(spec.type, indent)}")
    return "\n".join(lines)


def _print_func_decl(decl: go.FuncDecl) -> str:
    lines = []
    if decl.doc:
        lines.extend(line.strip() for line in decl.doc.splitlines())
    head = "func "
    if decl.recv is not None:
        head += f"({_print_fields(decl.recv, ', ', 0)}) "
    head += decl.name + (decl.type_params or "") + _print_signature(decl.type, 0)
    if decl.body is not None:
        head += " " + print_body(decl.body, 0)
    lines.append(head)
    return "\n".join(lines)


# ============================================================================
# EXPRESSIONS
# ============================================================================

def print_expr(expr: go.Expr, indent: int = 0) -> str:
    """Prints an expression or type; indent only matters for multi-line struct/interface types."""
    if isinstance(expr, go.Ident):
        return expr.name
    if isinstance(expr, go.BasicLit):
        return expr.value
    if isinstance(expr, go.RawExpr):
        return expr.text
    if isinstance(expr, go.SelectorExpr):
        return f"{print_expr(expr.x, indent)}.{expr.sel}"
    if isinstance(expr, go.StarExpr):
        return "*" + print_expr(expr.x, indent)
    if isinstance(expr, go.UnaryExpr):
        return expr.op + print_expr(expr.x, indent)
    if isinstance(expr, go.BinaryExpr):
        return f"{print_expr(expr.x, indent)} {expr.op} {print_expr(expr.y, indent)}"
    if isinstance(expr, go.ParenExpr):
        return f"({print_expr(expr.x, indent)})"
    if isinstance(expr, go.CallExpr):
        args = ", ".join(print_expr(a, indent) for a in expr.args)
        dots = "..." if expr.ellipsis else ""
        return f"{print_expr(expr.fun, indent)}({args}{dots})"
    if isinstance(expr, go.CompositeLit):
        head = print_expr(expr.type, indent) if expr.type is not None else ""
        elts = ", ".join(print_expr(e, indent) for e in expr.elts)
        return f"{head}{{{elts}}}"
    if isinstance(expr, go.KeyValueExpr):
        return f"{print_expr(expr.key, indent)}: {print_expr(expr.value, indent)}"
    if isinstance(expr, go.ArrayType):
        length = print_expr(expr.length, indent) if expr.length is not None else ""
        return f"[{length}]{print_expr(expr.elt, indent)}"
    if isinstance(expr, go.MapType):
        return f"map[{print_expr(expr.key, indent)}]{print_expr(expr.value, indent)}"
    if isinstance(expr, go.ChanType):
        return _print_chan(expr, indent)
    if isinstance(expr, go.Ellipsis):
        return "..." + print_expr(expr.elt, indent)
    if isinstance(expr, go.FuncType):
        return "func" + _print_signature(expr, indent)
    if isinstance(expr, go.StructType):
        return _print_struct(expr, indent)
    if isinstance(expr, go.InterfaceType):
        return _print_interface(expr, indent)
    if isinstance(expr, go.IndexExpr):
        indices = ", ".join(print_expr(i, indent) for i in expr.indices)
        return f"{print_expr(expr.x, indent)}[{indices}]"
    raise TypeError(f"unsupported expression: {type(expr).__name__}")


def _print_chan(expr: go.ChanType, indent: int) -> str:
    value = print_expr(expr.value, indent)
    if expr.dir == go.CHAN_SEND:
        return f"chan<- {value}"
    if expr.dir == go.CHAN_RECV:
        return f"<-chan {value}"
    # chan (<-chan T) needs the parens to keep its meaning
    if isinstance(expr.value, go.ChanType) and expr.value.dir == go.CHAN_RECV:
        value = f"({value})"
    return f"chan {value}"


def _print_signature(ftype: go.FuncType, indent: int) -> str:
    text = f"({_print_fields(ftype.params, ', ', indent)})"
    results = ftype.results.fields
    if not results:
        return text
    if len(results) == 1 and not results[0].names:
        return f"{text} {print_expr(results[0].type, indent)}"
    return f"{text} ({_print_fields(ftype.results, ', ', indent)})"


def _print_fields(fields: go.FieldList, sep: str, indent: int) -> str:
    parts = []
    for f in fields:
        type_text = print_expr(f.type, indent)
        if f.names:
            parts.append(f"{', '.join(f.names)} {type_text}")
        else:
            parts.append(type_text)
    return sep.join(parts)


def _print_struct(expr: go.StructType, indent: int) -> str:
    if not expr.fields.fields:
        return "struct{}"
    inner = INDENT * (indent + 1)
    lines = ["struct {"]
    for f in expr.fields:
        line = inner
        if f.names:
            line += ", ".join(f.names) + " "
        line += print_expr(f.type, indent + 1)
        if f.tag:
            line += " " + f.tag
        lines.append(line)
    lines.append(INDENT * indent + "}")
    return "\n".join(lines)


def _print_interface(expr: go.InterfaceType, indent: int) -> str:
    if not expr.methods.fields:
        return "interface{}"
    inner = INDENT * (indent + 1)
    lines = ["interface {"]
    for f in expr.methods:
        if f.names and isinstance(f.type, go.FuncType):
            lines.append(inner + f.names[0] + _print_signature(f.type, indent + 1))
        else:
            lines.append(inner + print_expr(f.type, indent + 1))
    lines.append(INDENT * indent + "}")
    return "\n".join(lines)


# ============================================================================
# STATEMENTS
# ============================================================================

def print_body(body: go.Body, indent: int) -> str:
    if isinstance(body, go.SourceBlock):
        return body.text
    return _print_block(body, indent)


def _print_block(block: go.Block, indent: int) -> str:
    if not block.stmts:
        return "{\n" + INDENT * indent + "}"
    lines = ["{"]
    for stmt in block.stmts:
        lines.append(INDENT * (indent + 1) + print_stmt(stmt, indent + 1))
    lines.append(INDENT * indent + "}")
    return "\n".join(lines)


def print_stmt(stmt: go.Stmt, indent: int = 0) -> str:
    if isinstance(stmt, go.ReturnStmt):
        if not stmt.results:
            return "return"
        return "return " + _print_exprs(stmt.results, indent)
    if isinstance(stmt, go.ExprStmt):
        return print_expr(stmt.x, indent)
    if isinstance(stmt, go.AssignStmt):
        return f"{_print_exprs(stmt.lhs, indent)} {stmt.tok} {_print_exprs(stmt.rhs, indent)}"
    if isinstance(stmt, go.SendStmt):
        return f"{print_expr(stmt.chan, indent)} <- {print_expr(stmt.value, indent)}"
    if isinstance(stmt, go.Block):
        return _print_block(stmt, indent)
    if isinstance(stmt, go.IfStmt):
        return _print_if(stmt, indent)
    if isinstance(stmt, go.RangeStmt):
        return _print_range(stmt, indent)
    raise TypeError(f"unsupported statement: {type(stmt).__name__}")


def _print_exprs(exprs, indent: int) -> str:
    return ", ".join(print_expr(e, indent) for e in exprs)


def _print_if(stmt: go.IfStmt, indent: int) -> str:
    head = "if "
    if stmt.init is not None:
        head += print_stmt(stmt.init, indent) + "; "
    text = f"{head}{print_expr(stmt.cond, indent)} {_print_block(stmt.body, indent)}"
    if isinstance(stmt.orelse, go.IfStmt):
        text += " else " + _print_if(stmt.orelse, indent)
    elif stmt.orelse is not None:
        text += " else " + _print_block(stmt.orelse, indent)
    return text


def _print_range(stmt: go.RangeStmt, indent: int) -> str:
    names: List[str] = []
    if stmt.key is not None or stmt.value is not None:
        names.append(print_expr(stmt.key, indent) if stmt.key is not None else "_")
    if stmt.value is not None:
        names.append(print_expr(stmt.value, indent))
    head = "for "
    if names:
        head += ", ".join(names) + " := "
    return f"{head}range {print_expr(stmt.x, indent)} {_print_block(stmt.body, indent)}"
