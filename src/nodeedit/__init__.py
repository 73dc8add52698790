# nodeedit
# Path-addressed editing of single nodes of a JSON document

from .document import FileDocument, MemoryDocument
from .errors import CoercionError, NodeEditError, ParseError, PathError
from .paths import get_at_path, path_to_str, set_at_path
from .rows import derive_display, derive_editable, reconstruct
from .session import NodeEditSession
