from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, Optional

from gelato.parser import PositionTable


class ParseOptions(BaseModel):
    """
    Options for a single Compiler.compile run.
    """
    skip_test_files: bool = False


class PackageInfo(BaseModel):
    """
    Describes the package directory currently being traversed.
    """
    module_name: str
    package_name: str
    import_path: str
    base_dir: str  # root passed to compile
    relative_dir: str  # "." for the root package


class FileInfo(PackageInfo):
    """
    PackageInfo plus the file being visited.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    file_name: str
    positions: Optional[PositionTable] = None
    # name -> "struct" | "interface" | "func" | "other" for every top-level type in the file
    declared_types: Dict[str, str] = Field(default_factory=dict)

    def position(self, offset: int) -> str:
        if self.positions is None:
            return "?"
        return self.positions.position(offset)

    def exported_interfaces(self):
        return [
            name for name, kind in self.declared_types.items()
            if kind == "interface" and name[:1].isupper()
        ]

    def type_info(self, type_name: str) -> "TypeInfo":
        return TypeInfo(**dict(self), type_name=type_name)

    def func_info(
        self,
        func_name: str,
        receiver_name: str = "",
        receiver_type: str = "",
        receiver_star: bool = False,
    ) -> "FuncInfo":
        return FuncInfo(
            **dict(self),
            func_name=func_name,
            receiver_name=receiver_name,
            receiver_type=receiver_type,
            receiver_star=receiver_star,
        )


class TypeInfo(FileInfo):
    """
    FileInfo for a type declaration.
    """
    type_name: str


class FuncInfo(FileInfo):
    """
    FileInfo for a function or method declaration. Receiver fields are empty for plain functions.
    """
    func_name: str
    receiver_name: str = ""
    receiver_type: str = ""
    receiver_star: bool = False

    @property
    def is_method(self) -> bool:
        return bool(self.receiver_type)
