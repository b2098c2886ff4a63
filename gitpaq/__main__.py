"""Run the gitpaq command line tool with `python -m gitpaq`."""

from gitpaq.tool.gitpaq import main

if __name__ == "__main__":
    main()
