from cdnopt.cli import main

main()
