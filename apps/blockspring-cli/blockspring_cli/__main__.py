from blockspring_cli.cli import main

main()
