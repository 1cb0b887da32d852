import os
import subprocess
import sys
from datetime import datetime
from pathlib import Path

COMPRESSED_EXTENSIONS = {".zip", ".gz", ".bz2", ".xz", ".7z", ".huf", ".cmp"}


class ChurnProgram:
    def __init__(self, compressed_name="TEST.CMP", expanded_name="TEST.OUT", log_name="CHURN.LOG"):
        self.total_files = 0
        self.total_passed = 0
        self.total_failed = 0
        self.compress_command = ""
        self.expand_command = ""
        self.compressed_name = compressed_name
        self.expanded_name = expanded_name
        self.log_name = log_name
        self.log_file = None

    def main(self, args) -> int:
        if len(args) != 3:
            self.usage_exit()

        root_dir = os.path.normpath(args[0]) + os.sep
        self.compress_command = args[1]
        self.expand_command = args[2]

        with open(self.log_name, "w", encoding="utf-8") as self.log_file:
            self.write_log_header()
            start_time = datetime.now()
            self.churn_files(root_dir)
            stop_time = datetime.now()
            self.write_log_summary(start_time, stop_time)

        return self.total_failed

    def churn_files(self, path):
        try:
            entries = sorted(os.scandir(path), key=lambda entry: entry.name)
        except PermissionError as ex:
            print(f"Access denied to {path}: {ex}", file=sys.stderr)
            return

        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                self.churn_files(entry.path)
            elif entry.is_file(follow_symlinks=False):
                if not self.file_is_already_compressed(entry.path):
                    print(f"Testing {entry.path}", file=sys.stderr)
                    if not self.compress(entry.path):
                        print("Comparison failed!", file=sys.stderr)

    def file_is_already_compressed(self, name):
        return Path(name).suffix.lower() in COMPRESSED_EXTENSIONS

    def compress(self, file_name):
        self.total_files += 1
        self.log_file.write(f"{file_name:<40} ")

        for name in (self.compressed_name, self.expanded_name):
            if os.path.exists(name):
                os.remove(name)

        ok = (self.execute_command(self.compress_command.replace("%s", f'"{file_name}"'))
              and self.execute_command(self.expand_command.replace("%s", f'"{file_name}"')))

        old_size = os.path.getsize(file_name)
        new_size = os.path.getsize(self.compressed_name) if os.path.exists(self.compressed_name) else 0
        self.log_file.write(f" {old_size:8} {new_size:8} ")
        ratio = 100 - (new_size * 100 // max(old_size, 1))
        self.log_file.write(f"{ratio:4}%  ")

        if not ok or not self.files_are_equal(file_name, self.expanded_name):
            self.log_file.write("Failed\n")
            self.total_failed += 1
            return False

        self.log_file.write("Passed\n")
        self.total_passed += 1
        return True

    def files_are_equal(self, file1, file2):
        """Compare two files byte by byte"""
        if not os.path.exists(file1) or not os.path.exists(file2):
            return False

        if os.path.getsize(file1) != os.path.getsize(file2):
            return False

        with open(file1, "rb") as f1, open(file2, "rb") as f2:
            while True:
                block1 = f1.read(4096)
                block2 = f2.read(4096)
                if block1 != block2:
                    return False
                if not block1:
                    return True

    def execute_command(self, command) -> bool:
        result = subprocess.run(command, shell=True, capture_output=True, text=True, check=False)
        if result.returncode != 0:
            print(f"Command failed with return code {result.returncode}: {command}", file=sys.stderr)
            return False
        return True

    def write_log_header(self):
        self.log_file.write("                                          Original   Packed\n")
        self.log_file.write("            File Name                     Size      Size   Ratio  Result\n")
        self.log_file.write("-------------------------------------     --------  --------  ----  ------\n")

    def write_log_summary(self, start_time, stop_time):
        elapsed_time = (stop_time - start_time).total_seconds()
        self.log_file.write(f"\nTotal elapsed time: {elapsed_time:.2f} seconds\n")
        self.log_file.write(f"Total files:   {self.total_files}\n")
        self.log_file.write(f"Total passed:  {self.total_passed}\n")
        self.log_file.write(f"Total failed:  {self.total_failed}\n")

    def usage_exit(self):
        usage = """
CHURN 1.0. Usage: CHURN root-dir "compress command" "expand command"

CHURN tests compression programs by compressing and expanding all files in a directory.

Example:
  CHURN data "python main_c.py %s TEST.CMP" "python main_e.py TEST.CMP TEST.OUT"
"""
        print(usage)
        sys.exit(1)


def main(argv=None) -> int:
    arguments = sys.argv if argv is None else argv
    return 1 if ChurnProgram().main(arguments[1:]) else 0


if __name__ == "__main__":
    sys.exit(main())
