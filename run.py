"""
Simple launcher for the Junapedia store directory.
This runs the Streamlit UI, which loads stores from Supabase on start.
"""

import os
import sys
import subprocess


def main():
    print(" JUNAPEDIA STORE DIRECTORY")
    print("=" * 60)
    print(" Starting Streamlit UI...")
    print(" Will open at: http://localhost:8501")
    print(" Press Ctrl+C to stop")
    print("=" * 60)

    streamlit_script = os.path.join(os.path.dirname(__file__), "junapedia", "ui", "streamlit_app.py")

    try:
        subprocess.run([
            sys.executable, "-m", "streamlit", "run",
            streamlit_script
        ], check=True)
    except KeyboardInterrupt:
        print("\n\n Shutting down gracefully...")
    except subprocess.CalledProcessError as e:
        print(f"\n Streamlit exited with code {e.returncode}")
        print("\n Install the UI extra first: pip install -e .[ui]")
        sys.exit(e.returncode)


if __name__ == "__main__":
    main()
