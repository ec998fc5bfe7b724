# error.py
"""""
Error taxonomy for the calculator engine.

Every error carries a 4-digit code. The first digit names the area:
2 = scientific function library, 3 = calculator pipeline,
4 = expression buffer, 5 = configuration.
"""""


class MathError(Exception):
    def __init__(self, message, code="9999", equation=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.equation = equation

class LexError(MathError):
    pass

class ParseError(MathError):
    pass

class DomainError(MathError):
    pass

class OverflowError(MathError):
    pass

class ConfigError(MathError):
    pass



Error_Dictionary = {

    "2" : "Scientific Calculation Error",
    "3" : "Calculator Error",
    "4" : "Expression Buffer Error",
    "5" : "Configuration Error",
    "9" : "Runtime Error"

}

#Error Messages are structured in:
# 1. Digit: Main Error
# 2. Digit: Detail
# 3. and 4. Digit: Error Number


ERROR_MESSAGES = {
    "2001" : "Unknown function: ", # + function name
    "2002" : "ln is only defined for x > 0.",
    "2003" : "log is only defined for x > 0.",
    "2004" : "Reciprocal of zero.",
    "2005" : "Square root of a negative number.",
    "2006" : "Zeroth root is undefined.",
    "2007" : "Even root of a negative number.",
    "2008" : "Factorial needs a finite, non-negative number.",
    "2009" : "Factorial needs an integer.",
    "2010" : "Invalid operation: ", # + operation
    "2011" : "Missing argument for function: ", # + function name

    "3001" : "Unrecognized character: ", # + character
    "3002" : "Unexpected end of input.",
    "3003" : "Division by zero",
    "3004" : "Modulo by zero",
    "3005" : "Unknown operator: ", # + operator
    "3006" : "Missing closing parenthesis",
    "3007" : "Missing opening parenthesis after function", # + function name
    "3008" : "Trailing input: ", # + token
    "3009" : "Unexpected token: ", # + token
    "3010" : "Unknown constant: ", # + constant
    "3011" : "Function needs at least one argument: ", # + function name
    "3012" : "Result out of range",
    "3013" : "Expression is empty.",

    "4001" : "No convertible number.",
    "4002" : "Entry can not be converted to a percentage.",
    "4003" : "No value to store.",
    "4004" : "No value to add to memory.",
    "4005" : "No value to subtract from memory.",
    "4006" : "Memory is empty.",
    "4007" : "Unknown memory action: ", # + action
    "4008" : "Memory value out of range.",

    "5001" : "Invalid angle unit: ", # + unit
    "5002" : "Invalid precision: ", # + value
    "5003" : "Invalid setting: ", # + key


    "9999" : "Unexpected Error: " #+error
}
