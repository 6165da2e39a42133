# src/openrepo/config.py

# Applied before any ignore file found in the scanned root.
DEFAULT_IGNORE_PATTERNS = [
    ".git",
    "node_modules/**",
]

# Ignore files read from the root of the scanned directory, in order.
IGNORE_FILE_NAMES = [
    ".gitignore",
    "repo_ignore",
]

MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024

# Bytes sniffed for NUL characters when deciding if a file is binary.
BINARY_SNIFF_BYTES = 8192

REGENERATE_DELAY_SECONDS = 0.75

TOKEN_ENCODING = "cl100k_base"

INSTRUCTION_MARKER = "Instruction"
NO_INSTRUCTION_PLACEHOLDER = "(No instructions provided)"

INSTRUCTION_TEMPLATES = {
    "explain": "Explain what this code does, module by module.",
    "review": "Review this code for bugs, edge cases and unclear naming.",
    "refactor": "Refactor this code for readability without changing its behavior.",
    "tests": "Write unit tests covering the main behavior of this code.",
    "docs": "Write documentation for the public API of this code.",
}

LANGUAGE_BY_EXTENSION = {
    ".py": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "jsx",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".json": "json",
    ".yml": "yaml",
    ".yaml": "yaml",
    ".toml": "toml",
    ".css": "css",
    ".scss": "scss",
    ".html": "html",
    ".md": "markdown",
    ".sh": "bash",
    ".rb": "ruby",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
}
