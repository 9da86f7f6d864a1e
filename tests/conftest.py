"""
Pytest configuration for the gelato test suite.

This conftest.py provides:
- Machine-mode logging (suppresses console output)
- Formatting disabled, so no Go toolchain is needed
- Fixtures that lay out small Go modules on disk
"""

import os
import shutil
import tempfile
from pathlib import Path

import pytest

from gelato.logging_config import setup_logging


# ============================================================================
# GLOBAL CONFIGURATION
# ============================================================================

def pytest_configure(config):
    """Configure pytest for quiet, toolchain-free runs."""
    os.environ.setdefault("GELATO_MACHINE_MODE", "1")
    os.environ.setdefault("GELATO_SKIP_FORMAT", "1")


# ============================================================================
# LOGGING FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def setup_test_logging():
    """
    Machine mode by default - suppress console logs for clean test output.
    """
    setup_logging(level="DEBUG", suppress_console=True, force=True)


# ============================================================================
# GO MODULE FIXTURES
# ============================================================================

MODULE_NAME = "example.com/shop"

GO_MOD = """module example.com/shop

go 1.21
"""

MAIN_GO = """package main

import (
	"fmt"

	"example.com/shop/internal/controller/lookup"
)

func main() {
	c, err := lookup.New(lookup.Config{Name: "shop"})
	if err != nil {
		panic(err)
	}
	fmt.Println(c.Count())
}
"""

LOOKUP_GO = """package lookup

import "errors"

// Controller finds items by key.
type Controller interface {
	Find(key string) (string, error)
	Count() int
	Reset()
}

type Config struct {
	Name string
}

type controller struct {
	cfg   Config
	items map[string]string
}

func New(cfg Config) (Controller, error) {
	if cfg.Name == "" {
		return nil, errors.New("missing name")
	}
	return &controller{cfg: cfg, items: map[string]string{}}, nil
}

func (c *controller) Find(key string) (string, error) {
	v, ok := c.items[key]
	if !ok {
		return "", errors.New("not found")
	}
	return v, nil
}

func (c *controller) Count() int {
	return len(c.items)
}

func (c *controller) Reset() {
	c.items = map[string]string{}
}

func (c *controller) helper() {}
"""

MAPPER_GO = """package mapper

type Kind int

type Item struct {
	ID     string
	Tags   []string
	Price  *float64
	Meta   map[string]int
	Next   *Item
	Kind   Kind
	Done   chan bool
	hidden int
}

type Mapper interface {
	Map(item Item) (Item, error)
	Batch(items ...Item) []Item
}
"""

MAPPER_TEST_GO = """package mapper

type FakeOnly struct {
	X int
}
"""

VENDORED_GO = """package dep

type Skipped struct {
	A int
}
"""


def write_tree(root: Path, files: dict) -> Path:
    """Writes {relative path: content} under root and returns root."""
    for relative, content in files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return root


def emitted_files(root: Path) -> dict:
    """relative path -> content of every generated file under root."""
    found = {}
    for out_dir in (".build", ".gen"):
        base = root / out_dir
        if not base.exists():
            continue
        for path in sorted(base.rglob("*.go")):
            found[path.relative_to(root).as_posix()] = path.read_text(encoding="utf-8")
    return found


@pytest.fixture
def temp_dir():
    """Create a temporary directory that's cleaned up after the test."""
    tmp = Path(tempfile.mkdtemp(prefix="gelato_test_"))
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def go_module(temp_dir, monkeypatch):
    """
    A small layered Go application.

    Layout:
        main.go                            package main, uses lookup
        internal/controller/lookup/        layered package
        internal/mapper/                   plain package, plus a _test.go file
        vendor/example.com/dep/            must never be visited
    """
    # debug dumps land in the working directory
    monkeypatch.chdir(temp_dir)
    return write_tree(temp_dir, {
        "go.mod": GO_MOD,
        "main.go": MAIN_GO,
        "internal/controller/lookup/lookup.go": LOOKUP_GO,
        "internal/mapper/mapper.go": MAPPER_GO,
        "internal/mapper/mapper_test.go": MAPPER_TEST_GO,
        "vendor/example.com/dep/dep.go": VENDORED_GO,
    })


@pytest.fixture
def write_go_tree():
    """The write_tree helper, for tests that build their own layouts."""
    return write_tree


@pytest.fixture
def read_emitted():
    """The emitted_files helper."""
    return emitted_files
