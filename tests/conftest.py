import pathlib
import site

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)

pytest_plugins = [
    'tests.fixtures.mocks',
]
