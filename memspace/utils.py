import os

def env_int(name, default=0):
    value = os.getenv(name, "")
    if value == "":
        return default
    return int(value)

def log(*args, **kwargs):
    MEMSPACE_LOG = env_int("MEMSPACE_LOG")
    if MEMSPACE_LOG:
        color_id = 3
        color0 = f"\033[0;{30+(color_id % 8)}m"
        color1 = f"\033[0m"
        print(color0, f"[{MEMSPACE_LOG=}] ", *args, color1, **kwargs)

def check_enabled():
    return env_int("MEMSPACE_CHECK") != 0
