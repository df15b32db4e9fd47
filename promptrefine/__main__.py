from promptrefine.cli import main

main()
