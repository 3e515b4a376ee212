class CategorizerError(Exception):
    pass


class ConfigError(CategorizerError):
    pass


class MissingColumn(CategorizerError):

    def __init__(self, sheet: str, column: str):
        self.sheet = sheet
        self.column = column
        super().__init__(f"Column '{column}' not found in sheet '{sheet}'")


class EmptyText(CategorizerError):

    def __init__(self, sheet: str, row_index: int):
        self.sheet = sheet
        self.row_index = row_index
        super().__init__(f"Empty free text in sheet '{sheet}', row {row_index}")


class ClassifierUnavailable(CategorizerError):
    pass


class IOFailure(CategorizerError):

    def __init__(self, message: str, sheet: str = None, category: str = None, row_index: int = None):
        self.sheet = sheet
        self.category = category
        self.row_index = row_index
        context = []
        if category is not None:
            context.append(f"category={category}")
        if sheet is not None:
            context.append(f"sheet={sheet}")
        if row_index is not None:
            context.append(f"row={row_index}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)
