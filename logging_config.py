class LoggingFlags:
    """Console logging switches for the simulator and its command-line host"""

    # Host output
    RUN_SUMMARY = True
    LOADER = True

    # Engine echo (the trace itself is always collected in the result)
    TRACE_ECHO = False
    PRIORITY_INHERITANCE = False
    DVFS_DECISIONS = False

    @classmethod
    def enable_all_debug(cls):
        """Enable all debug flags"""
        for attr in dir(cls):
            if not attr.startswith('_') and attr.isupper():
                setattr(cls, attr, True)

    @classmethod
    def disable_all_debug(cls):
        """Disable all debug flags except the run summary"""
        for attr in dir(cls):
            if not attr.startswith('_') and attr.isupper():
                if attr != 'RUN_SUMMARY':
                    setattr(cls, attr, False)

    @classmethod
    def set_production_mode(cls):
        """Minimal output: summary and loader warnings only"""
        cls.disable_all_debug()
        cls.RUN_SUMMARY = True
        cls.LOADER = True

def log_if(flag: bool, message: str, *args, **kwargs):
    """Print message only if flag is True"""
    if flag:
        print(message, *args, **kwargs)
