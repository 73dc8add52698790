from .nodeedit import main

main()
