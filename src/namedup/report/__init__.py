from .duplicate_group import DuplicateGroup, DuplicateReport
from .output import Output, StandardOutput, format_size
