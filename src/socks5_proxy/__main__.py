from socks5_proxy.cmd.cli import app

app(prog_name="socks5-proxy")
