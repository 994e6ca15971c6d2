class MathError(Exception):
    def __init__(self, message, code="9999", equation=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.equation = equation

    def describe(self):
        """Return 'code category: table message + detail' for logs."""
        category = Error_Dictionary.get(str(self.code)[:1], Error_Dictionary["9"])
        prefix = ERROR_MESSAGES.get(self.code, ERROR_MESSAGES["9999"])
        return f"{self.code} {category}: {prefix}{self.message}"

class SyntaxError(MathError):
    pass

class CalculationError(MathError):
    pass

class UnknownIdentifierError(CalculationError):
    pass

class UnknownConstantError(CalculationError):
    pass

class RewriteLimitError(MathError):
    pass

class ConfigurationError(MathError):
    pass


Error_Dictionary = {

    "2" : "Scientific Calculation Error",
    "3" : "Calculator Error",
    "5" : "Configuration Error",
    "9" : "Unexpected Error"

}

#Error Messages are structured in:
# 1. Digit: Main Error
# 2. Digit: Specification
# 3. and 4. Digit: Error Number


ERROR_MESSAGES = {
    "2001" : "Logarithm Syntax. ",
    "2002" : "Invalid Number or Base in Logarithm. ",
    "2005" : "Integration error: ", # + Reason
    "2006" : "Domain error in function: ", # + function

    "3003" : "Division by Zero. ",
    "3004" : "Invalid Operator: ", # + operator
    "3008" : "More than one '.' in one number. ",
    "3009" : "Missing ')'. ",
    "3011" : "Unexpected Token: ", # + Token
    "3012" : "Unexpected Character: ", # + Character
    "3013" : "Unterminated string literal. ",
    "3026" : "Number too big. ",
    "3027" : "Missing Number. ",
    "3031" : "Unknown identifier: ", # + name
    "3032" : "Unknown constant: ", # + key
    "3033" : "Not a function: ", # + name
    "3040" : "Rewrite did not settle: ", # + expression

    "5001" : "Unknown angle unit: ", # + value

    "9999" : "Unexpected Error: " #+error
}
