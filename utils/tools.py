import os

import chardet

from utils import static


class ExitCode:
    def __init__(self):
        self.code = 0

    def get(self):
        return self.code

    def set(self, code):
        self.code = code


exit_code = ExitCode()


def get_encoding(file_path):
    if not os.path.exists(file_path):
        return "utf-8"
    with open(file_path, "rb") as f:
        data = f.read()
    charset = chardet.detect(data)["encoding"]
    if not charset or charset.lower() == "ascii":
        return "utf-8"
    return charset


def pause():
    if not static.no_pause:
        input("Press Enter to exit...")
