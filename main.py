# Main.py
""""" Entry point for the Decimal Calculator.

   Responsibilities:
   - Verify required files exist in development mode
   - Load configuration and logging
   - Run the console loop over one expression buffer

"""""
import logging
import sys
from pathlib import Path
from CalcEngine import config_manager as config_manager
from CalcEngine import error as E
from CalcEngine.ExpressionBuffer import ExpressionBuffer


PROJECT_ROOT = Path(__file__).resolve().parent

COMMANDS = {
    ":percent": "apply percent to the last number",
    ":sign": "toggle the sign of the last number",
    ":ce": "clear the last entry",
    ":c": "clear the expression",
    ":del": "delete the last character",
    ":mc": "memory clear",
    ":mr": "memory recall",
    ":ms": "memory store",
    ":m+": "add to memory",
    ":m-": "subtract from memory",
    ":history": "show the calculation history",
    ":quit": "leave the calculator",
}

MEMORY_COMMANDS = {
    ":mc": "memory-clear",
    ":mr": "memory-recall",
    ":ms": "memory-store",
    ":m+": "memory-plus",
    ":m-": "memory-minus",
}


def check_files_exist():

    """
      Fail fast in development if required files are missing / moved / renamed.
    """

    modules_dir = PROJECT_ROOT / "CalcEngine"

    REQUIRED = [
        modules_dir / "MathEngine.py",
        modules_dir / "ScientificEngine.py",
        modules_dir / "ExpressionBuffer.py",
        modules_dir / "config_manager.py",
        PROJECT_ROOT / "config.json",
    ]

    missing_files = [file_path.name for file_path in REQUIRED if not file_path.exists()]

    if missing_files:
        print("Error: The following files are missing or in the wrong location:")
        for file_name in missing_files:
            print(f"- {file_name}")
        sys.exit(1)


def print_error(code, message=None, equation=None):
    """Catalogue text for the code, then the specific message and the failing input."""
    area = E.Error_Dictionary.get(str(code)[:1], "Error")
    print(f"{area} {code}: {E.ERROR_MESSAGES.get(code, 'Unknown error').rstrip(': ')}")
    if message:
        print(f"Details: {message}")
    if equation:
        print(f"Equation: {equation}")


def run_command(buffer, command):
    """Apply one ':' command to the buffer. Returns False when the loop should stop."""
    if command == ":quit":
        return False

    if command == ":percent":
        outcome = buffer.apply_percent()
        if not outcome.ok:
            print_error(outcome.code, outcome.error)
    elif command == ":sign":
        buffer.toggle_last_number_sign()
    elif command == ":ce":
        buffer.clear_entry()
    elif command == ":c":
        buffer.clear()
    elif command == ":del":
        buffer.delete_last()
    elif command in MEMORY_COMMANDS:
        outcome = buffer.handle_memory_action(MEMORY_COMMANDS[command])
        if not outcome.ok:
            print_error(outcome.code, outcome.error)
        elif buffer.memory_value is not None:
            print(f"M = {buffer.memory_value}")
    elif command == ":history":
        for item in buffer.history:
            print(f"{item.expression} = {item.result}")
        return True
    else:
        print("Commands: " + ", ".join(COMMANDS))
        return True

    print(buffer.text)
    return True


def run_console(buffer):
    """Lines are appended to the buffer; an empty line or '=' evaluates it."""
    while True:
        try:
            line = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return

        if line.startswith(":"):
            if not run_command(buffer, line):
                return
        elif line in ("", "="):
            outcome = buffer.evaluate()
            if outcome.ok:
                sign = "≈" if outcome.rounded else "="
                print(f"{sign} {outcome.formatted}")
            else:
                print_error(outcome.code, outcome.error, outcome.expression)
        else:
            buffer.append(line)
            print(buffer.text)


def main():

    """
    Load configuration and start the console loop.
    - Keep this thin: no business logic here.
    """

    logging.basicConfig(
        level=config_manager.load_setting_value("log_level") or "WARNING",
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        preferences = config_manager.load_preferences()
    except E.ConfigError as e:
        print_error(e.code, e.message)
        sys.exit(1)

    run_console(ExpressionBuffer(preferences))


if __name__ == "__main__":
    check_files_exist()
    main()
