"""Client entry points for finchat: Flask app and command-line tools."""
