"""
The factory package: random example values used by generated builders.
"""

from pathlib import Path

from gelato.compiler.config import FACTORY_DIR, GEN_DIR
from gelato.compiler.writer import GoWriter
from gelato.logging_config import logger

FACTORY_FILE = "factory.go"

FACTORY_SOURCE = '''// Package factory generates random example values for builders.
package factory

import (
	"errors"
	"math/rand"
)

const letters = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"

// String returns a random alphabetic string.
func String() string {
	b := make([]byte, 10)
	for i := range b {
		b[i] = letters[rand.Intn(len(letters))]
	}
	return string(b)
}

func Bool() bool {
	return rand.Intn(2) == 1
}

func Byte() byte {
	return byte(rand.Intn(1 << 8))
}

func Rune() rune {
	return rune(letters[rand.Intn(len(letters))])
}

func Int() int {
	return rand.Int()
}

func Int8() int8 {
	return int8(rand.Intn(1 << 7))
}

func Int16() int16 {
	return int16(rand.Intn(1 << 15))
}

func Int32() int32 {
	return rand.Int31()
}

func Int64() int64 {
	return rand.Int63()
}

func Uint() uint {
	return uint(rand.Uint32())
}

func Uint8() uint8 {
	return uint8(rand.Intn(1 << 8))
}

func Uint16() uint16 {
	return uint16(rand.Intn(1 << 16))
}

func Uint32() uint32 {
	return rand.Uint32()
}

func Uint64() uint64 {
	return rand.Uint64()
}

func Uintptr() uintptr {
	return uintptr(rand.Uint32())
}

func Float32() float32 {
	return rand.Float32()
}

func Float64() float64 {
	return rand.Float64()
}

func Complex64() complex64 {
	return complex(rand.Float32(), rand.Float32())
}

func Complex128() complex128 {
	return complex(rand.Float64(), rand.Float64())
}

// Error returns an error with a random message.
func Error() error {
	return errors.New(String())
}
'''


def factory_import_path(module_name: str) -> str:
    return f"{module_name}/{GEN_DIR}/{FACTORY_DIR}"


def write_factory(base_dir: Path, writer: GoWriter) -> Path:
    path = Path(base_dir) / GEN_DIR / FACTORY_DIR / FACTORY_FILE
    writer.write_source(path, FACTORY_SOURCE)
    logger.debug(f"Wrote factory package to {path}")
    return path
