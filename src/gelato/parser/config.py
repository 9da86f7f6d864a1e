# Source files the parser accepts
GO_SUFFIX = ".go"
GO_TEST_SUFFIX = "_test.go"

GO_MOD_FILE = "go.mod"
MODULE_DIRECTIVE = "module"

# Node types that introduce an interface method in the grammar (older
# tree-sitter-go releases use method_spec)
INTERFACE_METHOD_NODES = ("method_elem", "method_spec")

# Node types that embed another type in an interface
INTERFACE_EMBED_NODES = ("type_elem", "interface_type_name", "constraint_elem")

# Node types that end the scope of the names declared directly inside them
SCOPE_NODES = (
    "block",
    "func_literal",
    "if_statement",
    "for_statement",
    "expression_switch_statement",
    "type_switch_statement",
    "select_statement",
    "expression_case",
    "type_case",
    "communication_case",
    "default_case",
)
