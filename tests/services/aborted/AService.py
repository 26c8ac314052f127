"""File whose class name does not match its base name."""


class Wrong:
    pass
