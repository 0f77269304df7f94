class Command:
    """
    Accumulates an external tool invocation:
        <program> [subcommand] [positionals...] [params...] [flags...]

    Params and flags use `--` unless a different prefix is given, so both
    `--output dir` and `-o dir` styles can be expressed.
    """

    def __init__(self, command_name):
        self.command_name = command_name
        self.subcommand = None
        self.positionals = []
        self.command_param_dict = {}
        self.command_flags = []
        self.param_name_prefix = "--"

    def set_subcommand(self, subcommand):
        self.subcommand = subcommand
        return self

    def add_positional(self, *values):
        for v in values:
            self.positionals.append(str(v))
        return self

    def set_param(self, key, val, prefix=None):
        prefix = self.param_name_prefix if prefix is None else prefix
        self.command_param_dict[f"{prefix}{key}"] = str(val)
        return self

    def set_flags(self, *new_flag):
        for f in new_flag:
            self.command_flags.append(f)

        return self

    def argv(self) -> list:
        argv = [self.command_name]
        if self.subcommand is not None:
            argv.append(self.subcommand)
        argv.extend(self.positionals)
        for key, value in self.command_param_dict.items():
            argv.extend([key, value])
        for flag in self.command_flags:
            argv.append(f"{self.param_name_prefix}{flag}")
        return argv

    def __str__(self):
        return " ".join(self.argv())
