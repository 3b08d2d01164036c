import sys
from config import settings


def main():
    """
    Foresight entry point.
    Serves the prediction dashboard on the local machine.
    """
    from ui.app import app

    print("🔮 Foresight - Prediction Dashboard Starting...")
    print(f"📂 Prediction source: {settings.DATA_BASE_URL}")
    print("🌐 Open http://127.0.0.1:5000 in a browser")

    app.run(host="127.0.0.1", port=5000, debug=False)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n🛑 Execution interrupted by user.")
        sys.exit(0)
    except Exception as e:
        print(f"\n🔥 Fatal System Error: {e}")
        sys.exit(1)
