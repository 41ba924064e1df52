from infixcalc.cli import app

app(prog_name="infixcalc")
