from tikgrab.cli import app

app(prog_name="tikgrab")
