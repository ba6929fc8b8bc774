import os

# Allow the Qt-based tests to run on headless machines.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
