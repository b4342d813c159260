from dcform.cli.main import main

main()
