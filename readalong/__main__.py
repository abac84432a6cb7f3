from readalong.cli import main

main()
