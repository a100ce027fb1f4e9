"""Fatal interpreter conditions."""


class MachineHalted(RuntimeError):
    """The machine cannot continue: out-of-bounds fetch, stack overflow or a bad program.

    No state is returned alongside this error; the interpreter is stopped.
    """


class ProgramTooLarge(MachineHalted):
    """Program does not fit between the load offset and the end of memory."""
