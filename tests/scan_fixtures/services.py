from graphboot import AutoBindSingleton, ModuleDef, auto_bind_singleton


class Clock:
    def now(self) -> int:
        return 42


class SystemClock(Clock):
    pass


@AutoBindSingleton(base_class=Clock)
class ScannedClock(SystemClock):
    pass


@auto_bind_singleton
class ReportService:
    def __init__(self, clock: Clock, title: str):
        self.clock = clock
        self.title = title


@auto_bind_singleton
class ReportModule(ModuleDef):
    def __init__(self) -> None:
        super().__init__()
        self.make(str).using().value("monthly")


class NotScanned:
    pass
