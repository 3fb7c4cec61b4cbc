from mediaflow.cli import app

app(prog_name="mediaflow")
