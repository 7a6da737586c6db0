import os
import sys
import toml

from infrastructure.observability import setup_observability
from infrastructure.storage.sqlite_credential_storage import SQLiteCredentialStorage
from use_cases import auth_flow, bootstrap
from views.display_view import greeting

import auth

COMMANDS = {
    "status": None,
    "login": "request_login",
    "logout": "request_logout",
    "reset": "reset",
}

def load_secrets(path=".streamlit/secrets.toml"):
    # Mirror secrets into the environment so auth.get_secret finds them outside Streamlit.
    try:
        secrets = toml.load(path)
    except FileNotFoundError:
        return {}
    except toml.TomlDecodeError as e:
        print(f"⚠️ Could not parse {path}: {e}")
        return {}
    for key, value in secrets.items():
        if isinstance(value, (str, int, float)):
            os.environ.setdefault(key, str(value))
    return secrets

def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    name = argv[0] if argv else "status"
    if name not in COMMANDS:
        print(f"Usage: session_cli.py [{'|'.join(COMMANDS)}]")
        return 2

    load_secrets()
    setup_observability()

    storage = SQLiteCredentialStorage(auth.get_credential_db())
    startup = bootstrap.run_startup(storage)
    machine = startup.machine
    print(f"🔎 Previous session: {machine.state.label}")

    command = COMMANDS[name]
    if command is not None:
        result = auth_flow.run_command(machine, command)
        if result.reason == "ignored":
            print(f"ℹ️ '{name}' does nothing while state is {result.state}")

    print(f"📌 {machine.state.label}")
    print(greeting(startup.slot.get()))
    return 0

if __name__ == "__main__":
    sys.exit(main())
