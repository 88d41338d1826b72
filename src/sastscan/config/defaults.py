"""Starter .sastscan.toml template."""

DEFAULT_TOML = """\
# sastscan configuration
version = "1.0"

[scanner]
command = "jf"            # JFrog CLI executable
scan_mode = "file"        # passed as JF_SAST_DEFAULT_SCAN_MODE
log_level = "DEBUG"       # passed as JFROG_CLI_LOG_LEVEL
threads = 0               # 0 = number of CPUs, never fewer than 4
# extra_args = ["--working-dirs=src"]

[reports]
directory = "sast_reports"
keep = 5                  # number of most recent CSV reports to keep

[output]
show_table = true
show_csv = true

[staging]
keep = false              # keep the temporary copy of changed files
"""
