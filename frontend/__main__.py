import logging
import os

from frontend.views import BloodLinkApp


def main():
    logging.basicConfig(
        level=os.environ.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )
    app = BloodLinkApp()
    app.mainloop()


if __name__ == '__main__':
    main()
