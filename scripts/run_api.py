import subprocess
import sys
import os
from pathlib import Path

def main():
    project_root = Path(__file__).parent.parent
    os.chdir(project_root)

    # Make the src layout importable without an editable install
    env = os.environ.copy()
    src_path = str(project_root / "src")
    env["PYTHONPATH"] = os.pathsep.join(p for p in (src_path, env.get("PYTHONPATH")) if p)

    host = env.get("DELIVERY_QUOTE_HOST", "127.0.0.1")
    port = env.get("DELIVERY_QUOTE_PORT", "8000")
    args = [sys.executable, "-m", "uvicorn", "delivery_quote.api.main:app", "--host", host, "--port", port]
    if "--reload" in sys.argv[1:]:
        args.append("--reload")

    print(f"Starting Delivery Quote API on http://{host}:{port} ...")
    try:
        subprocess.run(args, env=env)
    except KeyboardInterrupt:
        print("\nAPI stopped.")

if __name__ == "__main__":
    main()
