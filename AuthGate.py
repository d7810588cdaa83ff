# AuthGate.py
from authgate.web import main

# ===============================
# 起動
# ===============================
if __name__ == "__main__":
    main()
