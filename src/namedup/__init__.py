from .scanner import DuplicateScanner
from .commands.scan import ScanSettings
from .errors import ScanError, InvalidRootError, UnreadableFileError, ScanCancelled
from .report import DuplicateGroup, DuplicateReport, Output, StandardOutput
from .utils.processor import Processor, compute_sha256_for_path
